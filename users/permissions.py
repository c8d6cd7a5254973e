from rest_framework import permissions

PROFILE_SETUP_REQUIRED = {
    "detail": "Complete your profile before continuing.",
    "next": "profile-setup",
}


def _has_profile(user):
    return hasattr(user, 'profile')


class HasProfile(permissions.BasePermission):
    """
    Blocks every screen except profile setup until the signed-in identity
    has created its profile.
    """
    message = PROFILE_SETUP_REQUIRED

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            _has_profile(request.user)
        )


class HasProfileOrReadOnly(permissions.BasePermission):
    """
    Anonymous visitors may read; a signed-in identity still needs a profile
    for anything, reads included.
    """
    message = PROFILE_SETUP_REQUIRED

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return request.method in permissions.SAFE_METHODS
        return _has_profile(request.user)
