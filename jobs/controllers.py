"""Screen controllers for the jobs listing, dashboard and the two job modals."""
import logging
from dataclasses import replace

from asgiref.sync import sync_to_async
from rest_framework import serializers

from jobboard_core.controllers import FormController, ScreenController
from jobboard_core.exceptions import AuthError, DuplicateError, JobBoardError, ValidationError
from users.domain import EMPLOYER, JOB_SEEKER
from . import rules
from .filters import JobFilter, filter_jobs
from .serializers import ApplicationFormSerializer, JobFormSerializer
from .services import ApplicationService, JobService
from .viewmodels import (
    EmployerDashboard, shape_employer_dashboard, shape_job, shape_job_listings, shape_seeker_dashboard,
)

LOGGER = logging.getLogger(__name__)

ALREADY_APPLIED = "You have already applied for this job"
APPLY_FAILED = "Failed to submit application. Please try again."
SAVE_JOB_FAILED = "Failed to save job. Please try again."
NOT_YOUR_JOB = "You can only manage your own job postings."


class JobsController(ScreenController):
    """Browse active jobs with client-side filters."""

    requires_identity = False
    load_error_message = "Could not load jobs. Please try again."

    def __init__(self, session, job_filter=None):
        super().__init__(session)
        self.jobs = ()
        self.applied_job_ids = frozenset()
        self.filter = job_filter or JobFilter()
        self.selected_job_id = None

    def fetch(self):
        jobs = shape_job_listings(JobService.list_active_jobs_with_employer())
        applied = frozenset()
        profile = self.session.profile
        if profile is not None and profile.role == JOB_SEEKER:
            # Jobs already applied to are not offered again
            applied = frozenset(ApplicationService.list_applied_job_ids(profile.id))
        return jobs, applied

    def apply(self, data):
        self.jobs, self.applied_job_ids = data

    def set_filter(self, **changes):
        self.filter = replace(self.filter, **changes)

    @property
    def visible_jobs(self):
        return filter_jobs(self.jobs, self.filter)

    def select(self, job_id):
        self.selected_job_id = job_id

    @property
    def selected_job(self):
        return next((job for job in self.visible_jobs if job.id == self.selected_job_id), None)

    def can_apply(self, job):
        return rules.can_apply(self.session.profile, job, self.applied_job_ids)

    def state(self):
        profile = self.session.profile
        jobs = self.visible_jobs
        selected = self.selected_job
        return dict(
            super().state(),
            filters={'search': self.filter.search, 'job_type': self.filter.job_type, 'location': self.filter.location},
            count=len(jobs),
            jobs=[dict(job.as_dict(), actions=rules.job_actions(profile, job, self.applied_job_ids)) for job in jobs],
            selected_job=selected.as_dict() if selected else None,
            sign_in_to_apply=profile is None,
        )


class DashboardController(ScreenController):
    """
    Employer: own postings with their applications and applicants.
    Job seeker: own applications with the job and its employer.
    """

    def __init__(self, session):
        super().__init__(session)
        self.dashboard = None

    def guard(self):
        self.session.require_profile()

    def fetch(self):
        profile = self.session.profile
        if profile.role == EMPLOYER:
            return shape_employer_dashboard(JobService.list_jobs_with_applications_for_employer(profile.id))
        return shape_seeker_dashboard(ApplicationService.list_applications_with_job_for_applicant(profile.id))

    def apply(self, data):
        self.dashboard = data

    def find_job(self, job_id):
        if not isinstance(self.dashboard, EmployerDashboard):
            return None
        return next((job for job in self.dashboard.jobs if job.id == job_id), None)

    def find_application(self, application_id):
        if not isinstance(self.dashboard, EmployerDashboard):
            return None, None
        for job in self.dashboard.jobs:
            for application in job.applications or ():
                if application.id == application_id:
                    return application, job
        return None, None

    async def toggle_job_status(self, job_id):
        job = self.find_job(job_id)
        if not rules.can_toggle_job(self.session.profile, job):
            return self._deny(NOT_YOUR_JOB)
        return await self._mutate(
            JobService.update_job_status, job.id, not job.is_active,
            failure_message="Failed to update job status."
        )

    async def delete_job(self, job_id):
        job = self.find_job(job_id)
        if not rules.can_delete_job(self.session.profile, job):
            return self._deny(NOT_YOUR_JOB)
        return await self._mutate(JobService.delete_job, job.id, failure_message="Failed to delete job.")

    async def update_application_status(self, application_id, status):
        if status not in rules.APPLICATION_STATUSES:
            self.error = f"Unknown application status: {status}"
            return False
        application, job = self.find_application(application_id)
        if not rules.can_set_application_status(self.session.profile, application, job, status):
            if application is None:
                return self._deny("You can only review applications to your own jobs.")
            return self._deny(f"An application that is {application.status} cannot be marked {status}.")
        return await self._mutate(
            ApplicationService.update_application_status, application.id, status,
            failure_message="Failed to update application status."
        )

    def state(self):
        data = super().state()
        profile = self.session.profile
        data['role'] = profile.role if profile else None
        if self.dashboard is None:
            return data
        data.update(self.dashboard.as_dict())
        if isinstance(self.dashboard, EmployerDashboard):
            jobs_by_id = {job.id: job for job in self.dashboard.jobs}
            for job_data in data['jobs']:
                job = jobs_by_id[job_data['id']]
                job_data['actions'] = rules.job_actions(profile, job)
                for app_data, application in zip(job_data.get('applications', []), job.applications or ()):
                    app_data['actions'] = rules.application_actions(profile, application, job)
        return data


class ApplyController(FormController):
    """Application modal for one job."""

    def __init__(self, session, job):
        super().__init__(session, initial={'cover_letter': ''})
        self.job = job
        self.success = False

    def guard(self):
        self.session.require_profile(JOB_SEEKER)

    async def submit(self):
        profile = self.session.profile
        if not rules.can_apply(profile, self.job):
            return self._deny("This job is not accepting applications.")

        serializer = ApplicationFormSerializer(data=self.form)
        if not serializer.is_valid():
            self.field_errors = serializer.errors
            return False
        cover_letter = serializer.validated_data.get('cover_letter')

        self.submitting = True
        self.error = None
        try:
            await sync_to_async(ApplicationService.create_application)(self.job.id, profile.id, cover_letter)
        except DuplicateError:
            return self._finish(ALREADY_APPLIED)
        except JobBoardError as exc:
            LOGGER.warning("Applying to job %s failed: %s", self.job.id, exc)
            return self._finish(APPLY_FAILED)
        if self._finish():
            self.success = True
        return self.success

    def state(self):
        return dict(
            super().state(),
            job={'id': self.job.id, 'title': self.job.title, 'location': self.job.location},
            success=self.success,
        )


class JobFormController(FormController):
    """Job posting modal: create a posting, or edit one the employer owns."""

    def __init__(self, session, job=None):
        super().__init__(session, initial=self._initial(job))
        self.job = job
        self.saved_job = None

    @staticmethod
    def _initial(job):
        if job is None:
            return {
                'title': '', 'description': '', 'job_type': 'full-time', 'location': '',
                'salary_min': '', 'salary_max': '', 'requirements': '',
            }
        return {
            'title': job.title,
            'description': job.description,
            'job_type': job.job_type,
            'location': job.location,
            'salary_min': '' if job.salary_min is None else str(job.salary_min),
            'salary_max': '' if job.salary_max is None else str(job.salary_max),
            'requirements': '\n'.join(job.requirements),
        }

    @property
    def is_edit(self):
        return self.job is not None

    def guard(self):
        profile = self.session.require_profile(EMPLOYER)
        if self.is_edit and not rules.can_edit_job(profile, self.job):
            raise AuthError(NOT_YOUR_JOB)

    def clean(self):
        """Validated job columns; raises ValidationError before anything is written."""
        serializer = JobFormSerializer(data=self.form)
        try:
            serializer.is_valid(raise_exception=True)
        except serializers.ValidationError as exc:
            raise ValidationError(exc.detail) from exc
        data = dict(serializer.validated_data)
        data.setdefault('requirements', [])
        data.setdefault('salary_min', None)
        data.setdefault('salary_max', None)
        if not self.is_edit:
            data['is_active'] = True
        return data

    async def submit(self):
        profile = self.session.profile
        try:
            data = self.clean()
        except ValidationError as exc:
            self.field_errors = exc.errors
            self.error = "Please fill in all required fields."
            return False

        self.field_errors = {}
        self.submitting = True
        self.error = None
        job_id = self.job.id if self.is_edit else None
        try:
            row = await sync_to_async(JobService.upsert_job)(profile.id, data, job_id)
        except JobBoardError as exc:
            LOGGER.warning("Saving job for employer %s failed: %s", profile.id, exc)
            return self._finish(SAVE_JOB_FAILED)
        if not self._finish():
            return False
        self.saved_job = shape_job(row)
        return True

    def state(self):
        return dict(
            super().state(),
            mode='edit' if self.is_edit else 'create',
            job=self.saved_job.as_dict() if self.saved_job else None,
        )
