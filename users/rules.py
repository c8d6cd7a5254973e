"""Profile-level authorization rules. Pure functions, no store access."""
from .domain import EMPLOYER, JOB_SEEKER

COMMON_PROFILE_FIELDS = frozenset({'full_name', 'phone', 'location', 'bio', 'resume_url'})

EDITABLE_PROFILE_FIELDS = {
    JOB_SEEKER: COMMON_PROFILE_FIELDS | {'skills'},
    EMPLOYER: COMMON_PROFILE_FIELDS | {'company_name', 'company_website'},
}


def is_seeker(profile):
    return profile is not None and profile.role == JOB_SEEKER


def is_employer(profile):
    return profile is not None and profile.role == EMPLOYER


def editable_profile_fields(profile):
    """Fields the profile owner may change. user_type and email are never listed."""
    if profile is None:
        return frozenset()
    return EDITABLE_PROFILE_FIELDS[profile.role]


def can_edit_profile(actor, target, fields=()):
    if actor is None or target is None or actor.id != target.id:
        return False
    return set(fields) <= editable_profile_fields(actor)


def forbidden_profile_fields(actor, fields):
    return sorted(set(fields) - editable_profile_fields(actor))
