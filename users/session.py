"""
Session store: the authenticated identity and its profile.

A store is created once per client session (or per request on the HTTP
surface, from the JWT identity) and handed to every screen controller.
Only sign_in, sign_out, refresh_profile and teardown mutate it; each of them
fires the store's ``changed`` signal afterwards.
"""
import logging

from django.contrib.auth import authenticate
from django.db import DatabaseError
from django.dispatch import Signal
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from jobboard_core.exceptions import AuthError, DataAccessError
from .domain import EMPLOYER, ROLES, Identity, profile_from_row
from .services import ProfileService

LOGGER = logging.getLogger(__name__)

ROLE_LABELS = {
    'job_seeker': 'a job seeker',
    'employer': 'an employer',
}


class SessionStore:

    def __init__(self):
        self.identity = None
        self.profile = None
        self.tokens = None
        self.pending_role = None
        self.loading = True
        self.changed = Signal()
        self._receivers = []

    # --- lifecycle ---

    @classmethod
    def from_request(cls, request):
        """Initialize a store for the identity authenticated on a DRF request."""
        store = cls()
        user = getattr(request, 'user', None)
        if user is None or not user.is_authenticated:
            store.loading = False
            return store
        try:
            row = ProfileService.get_profile(user.pk)
        finally:
            store.loading = False
        store.identity = Identity(id=user.pk, email=user.email)
        store.profile = profile_from_row(row)
        return store

    def teardown(self):
        self._clear()
        self._notify()
        for receiver in self._receivers:
            self.changed.disconnect(receiver)
        self._receivers = []

    def subscribe(self, receiver):
        """Connects ``receiver(sender, store, **kwargs)``; returns a callable that undoes it."""
        self.changed.connect(receiver, weak=False)
        self._receivers.append(receiver)

        def unsubscribe():
            self.changed.disconnect(receiver)
            if receiver in self._receivers:
                self._receivers.remove(receiver)
        return unsubscribe

    # --- state ---

    @property
    def is_authenticated(self):
        return self.identity is not None

    @property
    def requires_profile_setup(self):
        # An identity without a profile may only see the profile-setup screen
        return self.identity is not None and self.profile is None

    def as_dict(self):
        return {
            'identity': {'id': self.identity.id, 'email': self.identity.email} if self.identity else None,
            'profile': self.profile.as_dict() if self.profile else None,
            'pending_role': self.pending_role,
            'requires_profile_setup': self.requires_profile_setup,
            'loading': self.loading,
        }

    # --- operations ---

    def sign_in(self, role, email, password, request=None):
        """
        Authenticate a role-selected credential.
        Returns the issued token pair; raises AuthError on any failure.
        """
        if role not in ROLES:
            raise AuthError("Choose whether you are signing in as a job seeker or an employer.")

        self.loading = True
        try:
            try:
                user = authenticate(request, username=email, password=password)
            except DatabaseError as exc:
                LOGGER.error("Authentication backend failed for %s: %s", email, exc)
                raise AuthError("Could not reach the authentication service.") from exc
            if user is None:
                LOGGER.info("Rejected sign-in for %s", email)
                raise AuthError("Invalid email or password.")

            try:
                profile = profile_from_row(ProfileService.get_profile(user.pk))
                refresh = RefreshToken.for_user(user)
            except (DataAccessError, DatabaseError) as exc:
                raise AuthError("Could not reach the authentication service.") from exc

            if profile is not None and profile.role != role:
                raise AuthError(f"This account is registered as {ROLE_LABELS[profile.role]}.")
        finally:
            self.loading = False

        self.identity = Identity(id=user.pk, email=user.email)
        self.profile = profile
        self.pending_role = role if profile is None else None
        self.tokens = {'refresh': str(refresh), 'access': str(refresh.access_token)}
        LOGGER.info("Signed in %s as %s", user.email, role)
        self._notify()
        return self.tokens

    def sign_out(self, refresh_token=None):
        """Best-effort token revocation; local state is cleared regardless."""
        token = refresh_token or (self.tokens or {}).get('refresh')
        try:
            if token:
                RefreshToken(token).blacklist()
        except (TokenError, DatabaseError) as exc:
            LOGGER.warning("Could not revoke refresh token on sign-out: %s", exc)
        finally:
            email = self.identity.email if self.identity else None
            self._clear()
            self._notify()
        LOGGER.info("Signed out %s", email)

    def refresh_profile(self):
        if self.identity is None:
            self.profile = None
        else:
            self.profile = profile_from_row(ProfileService.get_profile(self.identity.id))
            if self.profile is not None:
                self.pending_role = None
        self._notify()
        return self.profile

    def require_profile(self, role=None):
        """Returns the profile, or raises AuthError when the screen may not render."""
        if self.identity is None:
            raise AuthError("Sign in to continue.")
        if self.profile is None:
            raise AuthError("Complete your profile before continuing.")
        if role is not None and self.profile.role != role:
            label = 'Employers' if role == EMPLOYER else 'Job seekers'
            raise AuthError(f"{label} only.")
        return self.profile

    def _clear(self):
        self.identity = None
        self.profile = None
        self.tokens = None
        self.pending_role = None
        self.loading = False

    def _notify(self):
        self.changed.send(sender=self.__class__, store=self)
