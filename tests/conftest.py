from types import SimpleNamespace

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from jobs.models import Application, Job
from users.models import Profile, User
from users.session import SessionStore

PASSWORD = 'Tr1cky-Passphrase!'


@pytest.fixture
def make_user(db):
    def make(email, password=PASSWORD, full_name=''):
        return User.objects.create_user(email=email, password=password, full_name=full_name)
    return make


@pytest.fixture
def make_profile(db):
    def make(user, user_type, **fields):
        fields.setdefault('full_name', user.full_name or user.email.split('@')[0].title())
        fields.setdefault('email', user.email)
        return Profile.objects.create(user=user, user_type=user_type, **fields)
    return make


@pytest.fixture
def employer(make_user, make_profile):
    user = make_user('hiring@acme.test', full_name='Grace Hopper')
    make_profile(user, 'employer', company_name='Acme Corp', company_website='https://acme.test')
    return user


@pytest.fixture
def other_employer(make_user, make_profile):
    user = make_user('jobs@globex.test', full_name='Hank Scorpio')
    make_profile(user, 'employer', company_name='Globex')
    return user


@pytest.fixture
def seeker(make_user, make_profile):
    user = make_user('ada@example.test', full_name='Ada Lovelace')
    make_profile(user, 'job_seeker', skills=['Python', 'Django'], location='London')
    return user


@pytest.fixture
def newcomer(make_user):
    """Signed-up identity that has not set up a profile yet."""
    return make_user('new@example.test')


@pytest.fixture
def make_job(db):
    def make(employer_user, **fields):
        fields.setdefault('title', 'Backend Engineer')
        fields.setdefault('description', 'Build and run our APIs.')
        fields.setdefault('location', 'Remote')
        return Job.objects.create(employer=employer_user.profile, **fields)
    return make


@pytest.fixture
def make_application(db):
    def make(job, seeker_user, **fields):
        return Application.objects.create(job=job, applicant=seeker_user.profile, **fields)
    return make


@pytest.fixture
def session_for(db):
    """A session store initialized the way a request initializes it."""
    def make(user=None):
        if user is None:
            return SessionStore.from_request(SimpleNamespace(user=SimpleNamespace(is_authenticated=False)))
        return SessionStore.from_request(SimpleNamespace(user=User.objects.get(pk=user.pk)))
    return make


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    """APIClient carrying a bearer token for user."""
    def make(user):
        token = RefreshToken.for_user(user)
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token.access_token}')
        return api_client
    return make
