import logging

from django.db import DatabaseError, transaction

from jobboard_core.exceptions import DataAccessError
from .models import Profile

LOGGER = logging.getLogger(__name__)

PROFILE_COLUMNS = (
    'user_type', 'full_name', 'email', 'phone', 'location', 'bio',
    'resume_url', 'skills', 'company_name', 'company_website',
)

# user_type is fixed at creation
UPDATABLE_COLUMNS = tuple(column for column in PROFILE_COLUMNS if column != 'user_type')


class ProfileService:
    """
    Gateway to the profiles table. Stateless; one attempt per call.
    Ownership is not checked here: callers consult users.rules first.
    """

    @staticmethod
    def get_profile(profile_id):
        """Returns the profiles row for an identity, or None when setup is pending."""
        try:
            profile = Profile.objects.filter(pk=profile_id).first()
        except DatabaseError as exc:
            LOGGER.error("get_profile(%s) failed: %s", profile_id, exc)
            raise DataAccessError('get_profile', exc) from exc
        return profile.to_row() if profile else None

    @staticmethod
    def create_profile(identity_id, row):
        data = {key: value for key, value in row.items() if key in PROFILE_COLUMNS}
        try:
            with transaction.atomic():
                profile = Profile.objects.create(user_id=identity_id, **data)
        except DatabaseError as exc:
            LOGGER.error("create_profile(%s) failed: %s", identity_id, exc)
            raise DataAccessError('create_profile', exc) from exc
        LOGGER.info("Created %s profile %s", profile.user_type, identity_id)
        return profile.to_row()

    @staticmethod
    def update_profile(profile_id, patch):
        data = {key: value for key, value in patch.items() if key in UPDATABLE_COLUMNS}
        try:
            with transaction.atomic():
                profile = Profile.objects.select_for_update().get(pk=profile_id)
                for key, value in data.items():
                    setattr(profile, key, value)
                profile.save()
        except Profile.DoesNotExist as exc:
            raise DataAccessError('update_profile', exc) from exc
        except DatabaseError as exc:
            LOGGER.error("update_profile(%s) failed: %s", profile_id, exc)
            raise DataAccessError('update_profile', exc) from exc
