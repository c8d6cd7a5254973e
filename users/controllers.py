import logging

from asgiref.sync import sync_to_async

from jobboard_core.controllers import FormController
from jobboard_core.exceptions import AuthError, JobBoardError
from .domain import EMPLOYER, JOB_SEEKER
from . import rules
from .serializers import ProfileSetupSerializer, ProfileUpdateSerializer
from .services import ProfileService

LOGGER = logging.getLogger(__name__)

PROFILE_SAVED = "Profile updated successfully"
PROFILE_SAVE_FAILED = "Failed to update profile"
PROFILE_CREATE_FAILED = "Failed to create profile. Please try again."


def _profile_form(profile):
    form = {
        'full_name': profile.full_name,
        'phone': profile.phone or '',
        'location': profile.location or '',
        'bio': profile.bio or '',
        'resume_url': profile.resume_url or '',
    }
    if profile.role == EMPLOYER:
        form['company_name'] = profile.company_name or ''
        form['company_website'] = profile.company_website or ''
    elif profile.role == JOB_SEEKER:
        form['skills'] = ', '.join(profile.skills)
    return form


class ProfileController(FormController):
    """View and edit the signed-in profile."""

    def __init__(self, session):
        super().__init__(session)
        self.editing = False
        self.message = None

    def guard(self):
        self.session.require_profile()

    async def mount(self):
        await super().mount()
        self.form = _profile_form(self.session.profile)

    def start_editing(self):
        self.editing = True
        self.message = None

    def cancel(self):
        self.editing = False
        self.field_errors = {}
        self.form = _profile_form(self.session.profile)

    async def save(self):
        profile = self.session.profile
        if not rules.can_edit_profile(profile, profile, self.form):
            forbidden = rules.forbidden_profile_fields(profile, self.form)
            self.message = f"These fields cannot be changed: {', '.join(forbidden)}"
            return self._deny(self.message)

        serializer = ProfileUpdateSerializer(data=self.form, partial=True)
        if not serializer.is_valid():
            self.field_errors = serializer.errors
            self.message = PROFILE_SAVE_FAILED
            return False

        self.field_errors = {}
        self.submitting = True
        self.message = None
        try:
            await sync_to_async(ProfileService.update_profile)(profile.id, serializer.validated_data)
            await sync_to_async(self.session.refresh_profile)()
        except JobBoardError as exc:
            LOGGER.warning("Updating profile %s failed: %s", profile.id, exc)
            if self.mounted:
                self.message = PROFILE_SAVE_FAILED
            return self._finish(PROFILE_SAVE_FAILED)
        if not self._finish():
            return False
        self.editing = False
        self.message = PROFILE_SAVED
        self.form = _profile_form(self.session.profile)
        return True

    def state(self):
        profile = self.session.profile
        return dict(
            super().state(),
            profile=profile.as_dict() if profile else None,
            editable_fields=sorted(rules.editable_profile_fields(profile)),
            editing=self.editing,
            message=self.message,
        )


class ProfileSetupController(FormController):
    """
    The only screen an identity without a profile may see. Picks the role
    (immutable afterwards) and creates the profile row.
    """

    def __init__(self, session):
        identity = session.identity
        super().__init__(session, initial={
            'user_type': session.pending_role or '',
            'full_name': '',
            'email': identity.email if identity else '',
            'phone': '',
            'location': '',
            'bio': '',
            'company_name': '',
            'company_website': '',
            'skills': '',
        })
        self.completed = False

    def guard(self):
        if self.session.identity is None:
            raise AuthError("Sign in to continue.")
        if self.session.profile is not None:
            raise AuthError("Your profile is already set up.")

    async def submit(self):
        if not self.form.get('user_type'):
            self.error = "Please select account type"
            return False

        serializer = ProfileSetupSerializer(data=self.form)
        if not serializer.is_valid():
            self.field_errors = serializer.errors
            self.error = "Please fill in all required fields."
            return False

        self.field_errors = {}
        self.submitting = True
        self.error = None
        identity = self.session.identity
        try:
            await sync_to_async(ProfileService.create_profile)(identity.id, serializer.validated_data)
            await sync_to_async(self.session.refresh_profile)()
        except JobBoardError as exc:
            LOGGER.warning("Creating profile for %s failed: %s", identity.id, exc)
            return self._finish(PROFILE_CREATE_FAILED)
        if self._finish():
            self.completed = True
        return self.completed

    def state(self):
        return dict(super().state(), completed=self.completed, next='dashboard' if self.completed else None)
