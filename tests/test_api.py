"""HTTP flows through the DRF views."""
from datetime import timedelta

import pytest
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken
from rest_framework_simplejwt.tokens import RefreshToken

from jobboard_core.exceptions import DataAccessError
from jobs.models import Application, Job
from users.models import Profile
from users.services import ProfileService

from .conftest import PASSWORD


def login(api_client, role, email, password=PASSWORD):
    return api_client.post('/api/users/login/', {'role': role, 'email': email, 'password': password}, format='json')


@pytest.mark.django_db
class TestAuthFlow:
    def test_register_sign_in_and_set_up_profile(self, api_client):
        response = api_client.post('/api/users/register/', {
            'email': 'grace@navy.test', 'full_name': 'Grace Hopper', 'password': 'Compilers-4-All!',
        }, format='json')
        assert response.status_code == 201
        assert 'password' not in response.data

        response = login(api_client, 'employer', 'grace@navy.test', 'Compilers-4-All!')
        assert response.status_code == 200
        assert response.data['session']['requires_profile_setup'] is True
        assert response.data['session']['pending_role'] == 'employer'
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")

        response = api_client.get('/api/jobs/dashboard/')
        assert response.status_code == 403
        assert response.data['next'] == 'profile-setup'

        response = api_client.post('/api/users/profile/setup/', {
            'user_type': 'employer', 'full_name': 'Grace Hopper', 'company_name': 'US Navy',
        }, format='json')
        assert response.status_code == 201
        assert response.data['completed'] is True

        response = api_client.get('/api/jobs/dashboard/')
        assert response.status_code == 200
        assert response.data['role'] == 'employer'
        assert response.data['jobs'] == []

    def test_bad_credentials(self, api_client, seeker):
        response = login(api_client, 'job_seeker', seeker.email, 'wrong-password')
        assert response.status_code == 401
        assert response.data['error'] == "Invalid email or password."

    def test_role_mismatch(self, api_client, seeker):
        response = login(api_client, 'employer', seeker.email)
        assert response.status_code == 401

    def test_sign_out_revokes_the_refresh_token(self, api_client, seeker):
        tokens = login(api_client, 'job_seeker', seeker.email).data
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        response = api_client.post('/api/users/logout/', {'refresh': tokens['refresh']}, format='json')
        assert response.status_code == 200
        assert response.data['session']['identity'] is None

        api_client.credentials()
        response = api_client.post('/api/users/token/refresh/', {'refresh': tokens['refresh']}, format='json')
        assert response.status_code == 401

    def test_sign_out_with_an_expired_access_token(self, api_client, seeker):
        refresh = RefreshToken.for_user(seeker)
        access = refresh.access_token
        access.set_exp(lifetime=-timedelta(minutes=5))
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {access}')

        response = api_client.post('/api/users/logout/', {'refresh': str(refresh)}, format='json')

        assert response.status_code == 200
        assert response.data['session']['identity'] is None
        assert BlacklistedToken.objects.filter(token__jti=refresh['jti']).exists()

    def test_session_lookup_failure_is_unavailable(self, client_for, seeker, monkeypatch):
        def fail(profile_id):
            raise DataAccessError('get_profile')

        monkeypatch.setattr(ProfileService, 'get_profile', staticmethod(fail))

        response = client_for(seeker).get('/api/users/session/')

        assert response.status_code == 503

    def test_sign_out_always_succeeds(self, api_client):
        response = api_client.post('/api/users/logout/', {'refresh': 'garbage'}, format='json')
        assert response.status_code == 200

    def test_session_snapshot(self, api_client, client_for, employer):
        assert api_client.get('/api/users/session/').data['identity'] is None

        data = client_for(employer).get('/api/users/session/').data
        assert data['identity']['email'] == employer.email
        assert data['profile']['company_name'] == 'Acme Corp'


@pytest.mark.django_db
class TestProfileEndpoints:
    def test_get_and_patch_profile(self, client_for, seeker):
        client = client_for(seeker)
        response = client.get('/api/users/profile/')
        assert response.status_code == 200
        assert response.data['profile']['user_type'] == 'job_seeker'
        assert 'company_name' not in response.data['editable_fields']

        response = client.patch('/api/users/profile/', {'bio': 'Analytical engines.'}, format='json')
        assert response.status_code == 200
        assert response.data['profile']['bio'] == 'Analytical engines.'

    def test_role_is_read_only(self, client_for, seeker):
        response = client_for(seeker).patch('/api/users/profile/', {'user_type': 'employer'}, format='json')
        assert response.status_code == 403
        assert Profile.objects.get(pk=seeker.pk).user_type == 'job_seeker'

    def test_setup_twice_is_refused(self, client_for, seeker):
        response = client_for(seeker).post('/api/users/profile/setup/', {'user_type': 'employer'}, format='json')
        assert response.status_code == 403


@pytest.mark.django_db
class TestJobEndpoints:
    JOB = {
        'title': 'Backend Engineer', 'description': 'Own our APIs.', 'job_type': 'full-time',
        'location': 'Lagos', 'salary_min': 50000, 'salary_max': 80000, 'requirements': 'Python\nDjango',
    }

    def test_anonymous_listing_and_filters(self, api_client, employer, make_job):
        make_job(employer, title='Python Developer', location='Lagos')
        make_job(employer, title='Designer', location='Abuja')
        make_job(employer, title='Python Closed', is_active=False)

        response = api_client.get('/api/jobs/')
        assert response.status_code == 200
        assert response.data['count'] == 2
        assert response.data['jobs'][0]['employer']['display_name'] == 'Acme Corp'

        response = api_client.get('/api/jobs/', {'search': 'python', 'location': 'lagos'})
        assert [job['title'] for job in response.data['jobs']] == ['Python Developer']

    def test_anonymous_cannot_post(self, api_client):
        response = api_client.post('/api/jobs/', self.JOB, format='json')
        assert response.status_code == 401

    def test_employer_posts_a_job(self, client_for, employer):
        response = client_for(employer).post('/api/jobs/', self.JOB, format='json')
        assert response.status_code == 201
        job = Job.objects.get()
        assert job.is_active is True
        assert job.requirements == ['Python', 'Django']
        assert response.data['job']['salary_label'] == '$50,000 - $80,000'

    def test_invalid_job_is_rejected(self, client_for, employer):
        response = client_for(employer).post('/api/jobs/', dict(self.JOB, job_type='gig'), format='json')
        assert response.status_code == 400
        assert 'job_type' in response.data['field_errors']
        assert not Job.objects.exists()

    def test_seeker_cannot_post(self, client_for, seeker):
        response = client_for(seeker).post('/api/jobs/', self.JOB, format='json')
        assert response.status_code == 403

    def test_owner_edits_and_toggles(self, client_for, employer, make_job):
        job = make_job(employer)
        client = client_for(employer)

        response = client.put(f'/api/jobs/{job.id}/', dict(self.JOB, title='Lead Engineer'), format='json')
        assert response.status_code == 200
        assert response.data['mode'] == 'edit'

        response = client.post(f'/api/jobs/{job.id}/toggle/')
        assert response.status_code == 200
        job.refresh_from_db()
        assert (job.title, job.is_active) == ('Lead Engineer', False)

    def test_non_owner_is_refused(self, client_for, employer, other_employer, make_job):
        job = make_job(other_employer)
        client = client_for(employer)

        assert client.put(f'/api/jobs/{job.id}/', self.JOB, format='json').status_code == 403
        assert client.delete(f'/api/jobs/{job.id}/').status_code == 403
        assert client.post(f'/api/jobs/{job.id}/toggle/').status_code == 403
        assert Job.objects.filter(pk=job.id, is_active=True).exists()

    def test_unpublished_job_is_hidden_from_others(self, client_for, employer, other_employer, seeker, make_job):
        job = make_job(employer, title='Unannounced Role', is_active=False)

        response = client_for(seeker).post(f'/api/jobs/{job.id}/apply/', {}, format='json')
        assert response.status_code == 404
        assert 'Unannounced Role' not in str(response.data)

        response = client_for(other_employer).put(f'/api/jobs/{job.id}/', self.JOB, format='json')
        assert response.status_code == 404

        response = client_for(employer).put(f'/api/jobs/{job.id}/', self.JOB, format='json')
        assert response.status_code == 200
        assert not Application.objects.exists()

    def test_missing_job(self, client_for, employer, seeker):
        assert client_for(employer).put('/api/jobs/999/', self.JOB, format='json').status_code == 404
        assert client_for(seeker).post('/api/jobs/999/apply/', {}, format='json').status_code == 404

    def test_owner_deletes(self, client_for, employer, seeker, make_job, make_application):
        job = make_job(employer)
        make_application(job, seeker)

        response = client_for(employer).delete(f'/api/jobs/{job.id}/')

        assert response.status_code == 200
        assert not Job.objects.exists()
        assert not Application.objects.exists()


@pytest.mark.django_db
class TestApplicationEndpoints:
    def test_apply_once(self, client_for, employer, seeker, make_job):
        job = make_job(employer)
        client = client_for(seeker)

        response = client.post(f'/api/jobs/{job.id}/apply/', {'cover_letter': 'Hire me'}, format='json')
        assert response.status_code == 201
        assert response.data['success'] is True

        response = client.post(f'/api/jobs/{job.id}/apply/', {}, format='json')
        assert response.status_code == 409
        assert response.data['error'] == "You have already applied for this job"

        dashboard = client.get('/api/jobs/dashboard/').data
        assert dashboard['pending'] == 1
        assert dashboard['applications'][0]['cover_letter'] == 'Hire me'

    def test_listing_hides_apply_after_applying(self, client_for, employer, seeker, make_job):
        job = make_job(employer)
        client = client_for(seeker)
        assert client.get('/api/jobs/').data['jobs'][0]['actions'] == ['apply']

        client.post(f'/api/jobs/{job.id}/apply/', {}, format='json')

        assert client.get('/api/jobs/').data['jobs'][0]['actions'] == []

    def test_employer_cannot_apply(self, client_for, employer, make_job):
        job = make_job(employer)
        assert client_for(employer).post(f'/api/jobs/{job.id}/apply/', {}, format='json').status_code == 403

    def test_review_application(self, client_for, employer, other_employer, seeker, make_job, make_application):
        application = make_application(make_job(employer), seeker)
        url = f'/api/jobs/applications/{application.id}/status/'

        assert client_for(other_employer).post(url, {'status': 'accepted'}, format='json').status_code == 403

        client = client_for(employer)
        response = client.post(url, {'status': 'reviewed'}, format='json')
        assert response.status_code == 200
        assert response.data['jobs'][0]['applications'][0]['status'] == 'reviewed'

        assert client.post(url, {'status': 'pending'}, format='json').status_code == 403
        assert client.post(url, {'status': 'hired'}, format='json').status_code == 400
        assert Application.objects.get(pk=application.id).status == 'reviewed'
