import pytest
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken

from jobboard_core.exceptions import AuthError
from users.domain import EmployerProfile, SeekerProfile, profile_from_row
from users.session import SessionStore

from .conftest import PASSWORD


class TestProfileVariants:
    def test_row_is_lifted_into_its_variant(self):
        seeker = profile_from_row({'id': 1, 'user_type': 'job_seeker', 'full_name': 'Ada', 'skills': ['Go'],
                                   'company_name': 'ignored'})
        assert isinstance(seeker, SeekerProfile)
        assert seeker.skills == ('Go',)
        assert not hasattr(seeker, 'company_name')

        employer = profile_from_row({'id': 2, 'user_type': 'employer', 'full_name': 'Grace', 'company_name': None})
        assert isinstance(employer, EmployerProfile)
        assert employer.display_name == 'Grace'
        assert employer.as_dict()['user_type'] == 'employer'

    def test_missing_row_is_none(self):
        assert profile_from_row(None) is None

    def test_unknown_role_is_rejected(self):
        with pytest.raises(ValueError):
            profile_from_row({'id': 1, 'user_type': 'admin', 'full_name': 'x'})


@pytest.mark.django_db
class TestSignIn:
    def test_sign_in_loads_profile_and_issues_tokens(self, seeker):
        session = SessionStore()
        tokens = session.sign_in('job_seeker', seeker.email, PASSWORD)

        assert set(tokens) == {'refresh', 'access'}
        assert session.identity.email == seeker.email
        assert session.profile.is_seeker
        assert not session.requires_profile_setup
        assert session.loading is False

    def test_wrong_password(self, seeker):
        session = SessionStore()
        with pytest.raises(AuthError, match="Invalid email or password."):
            session.sign_in('job_seeker', seeker.email, 'not-the-password')
        assert session.identity is None

    def test_role_must_match_the_profile(self, employer):
        session = SessionStore()
        with pytest.raises(AuthError, match="registered as an employer"):
            session.sign_in('job_seeker', employer.email, PASSWORD)
        assert session.identity is None

    def test_identity_without_profile_must_set_up(self, newcomer):
        session = SessionStore()
        session.sign_in('employer', newcomer.email, PASSWORD)

        assert session.profile is None
        assert session.requires_profile_setup
        assert session.pending_role == 'employer'
        with pytest.raises(AuthError, match="Complete your profile"):
            session.require_profile()

    def test_unknown_role(self, seeker):
        with pytest.raises(AuthError):
            SessionStore().sign_in('admin', seeker.email, PASSWORD)


@pytest.mark.django_db
class TestSessionChanges:
    def test_sign_out_revokes_and_clears(self, seeker):
        session = SessionStore()
        tokens = session.sign_in('job_seeker', seeker.email, PASSWORD)
        events = []
        session.subscribe(lambda sender, store, **kwargs: events.append(store.identity))

        session.sign_out()

        assert events == [None]
        assert session.identity is None and session.profile is None and session.tokens is None
        assert BlacklistedToken.objects.filter(token__token=tokens['refresh']).exists()

    def test_sign_out_clears_even_when_revocation_fails(self, seeker):
        session = SessionStore()
        session.sign_in('job_seeker', seeker.email, PASSWORD)

        session.sign_out('not-a-token')

        assert not session.is_authenticated

    def test_unsubscribe_stops_notifications(self, seeker):
        session = SessionStore()
        events = []
        unsubscribe = session.subscribe(lambda sender, store, **kwargs: events.append(1))
        session.sign_in('job_seeker', seeker.email, PASSWORD)
        unsubscribe()
        session.sign_out()
        assert events == [1]

    def test_refresh_profile_after_setup(self, newcomer, make_profile):
        session = SessionStore()
        session.sign_in('job_seeker', newcomer.email, PASSWORD)
        make_profile(newcomer, 'job_seeker')

        profile = session.refresh_profile()

        assert profile.is_seeker
        assert session.pending_role is None
        assert not session.requires_profile_setup

    def test_require_profile_checks_the_role(self, session_for, employer):
        session = session_for(employer)
        assert session.require_profile('employer').company_name == 'Acme Corp'
        with pytest.raises(AuthError, match="Job seekers only."):
            session.require_profile('job_seeker')

    def test_anonymous_session(self, session_for):
        session = session_for()
        assert not session.is_authenticated
        assert session.as_dict()['identity'] is None
        with pytest.raises(AuthError, match="Sign in to continue."):
            session.require_profile()

    def test_teardown_disconnects_receivers(self, session_for, seeker):
        session = session_for(seeker)
        events = []
        session.subscribe(lambda sender, store, **kwargs: events.append(store.identity))
        session.teardown()
        session.sign_out()
        assert events == [None]
