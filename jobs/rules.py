"""
Authorization rules for jobs and applications.

Every predicate takes the acting profile (a users.domain variant, or None
for an anonymous visitor) and a row or shaped card, and decides whether an action may
be offered. The backing store stays the final authority; these rules only
keep the client from offering actions it would reject.
"""
from collections.abc import Mapping

from users.rules import is_employer, is_seeker

# Job actions
EDIT = 'edit'
DELETE = 'delete'
TOGGLE = 'toggle'
APPLY = 'apply'
VIEW_APPLICATIONS = 'view_applications'

PENDING = 'pending'
REVIEWED = 'reviewed'
ACCEPTED = 'accepted'
REJECTED = 'rejected'
APPLICATION_STATUSES = (PENDING, REVIEWED, ACCEPTED, REJECTED)

# Forward-only lattice; accepted and rejected are terminal
STATUS_TRANSITIONS = {
    PENDING: (REVIEWED, ACCEPTED, REJECTED),
    REVIEWED: (ACCEPTED, REJECTED),
    ACCEPTED: (),
    REJECTED: (),
}


def _get(record, name):
    # Rules accept store rows (dicts) and shaped view-models alike
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def owns_job(profile, job):
    return is_employer(profile) and job is not None and _get(job, 'employer_id') == profile.id


def can_view_job(profile, job):
    if job is None:
        return False
    return bool(_get(job, 'is_active')) or owns_job(profile, job)


def can_create_job(profile):
    return is_employer(profile)


def can_edit_job(profile, job):
    return owns_job(profile, job)


def can_delete_job(profile, job):
    return owns_job(profile, job)


def can_toggle_job(profile, job):
    return owns_job(profile, job)


def can_apply(profile, job, applied_job_ids=()):
    """A seeker may apply once to an active job."""
    if not is_seeker(profile) or job is None or not _get(job, 'is_active'):
        return False
    return _get(job, 'id') not in set(applied_job_ids)


def can_view_application(profile, application, job=None):
    if profile is None or application is None:
        return False
    if is_seeker(profile):
        return _get(application, 'applicant_id') == profile.id
    return owns_job(profile, job) and _get(application, 'job_id') == _get(job, 'id')


def allowed_status_transitions(current):
    return STATUS_TRANSITIONS.get(current, ())


def can_set_application_status(profile, application, job, status):
    """Only the owner of the application's job may move it, and only forward."""
    if not can_view_application(profile, application, job) or not is_employer(profile):
        return False
    return status in allowed_status_transitions(_get(application, 'status'))


def job_actions(profile, job, applied_job_ids=()):
    """Actions a screen may offer on one job, in display order."""
    actions = []
    if can_apply(profile, job, applied_job_ids):
        actions.append(APPLY)
    if owns_job(profile, job):
        actions.extend([EDIT, TOGGLE, DELETE, VIEW_APPLICATIONS])
    return actions


def application_actions(profile, application, job):
    """Status values the profile may set next on this application."""
    return [
        status for status in allowed_status_transitions(_get(application, 'status'))
        if can_set_application_status(profile, application, job, status)
    ]
