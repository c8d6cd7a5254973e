"""
Data access for jobs and applications.

Every call is a single attempt against the store and returns plain row
dicts; joined reads embed related rows the way the store's nested selects do
(``employer``, ``applications``, ``applicant``, ``job``). A related row that
cannot be loaded is embedded as None instead of failing the whole read.
"""
import logging

from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Prefetch
from django.utils import timezone

from jobboard_core.exceptions import DataAccessError, DuplicateError
from .models import Application, Job

LOGGER = logging.getLogger(__name__)

NEWEST_FIRST = ('-created_at', '-id')

JOB_COLUMNS = (
    'title', 'description', 'requirements', 'job_type', 'location',
    'salary_min', 'salary_max', 'is_active',
)


def _related_row(instance, attr):
    try:
        related = getattr(instance, attr)
    except ObjectDoesNotExist:
        return None
    return related.to_row() if related is not None else None


def _job_with_employer(job):
    return dict(job.to_row(), employer=_related_row(job, 'employer'))


def _application_with_applicant(application):
    return dict(application.to_row(), applicant=_related_row(application, 'applicant'))


def _application_with_job(application):
    try:
        job = application.job
    except ObjectDoesNotExist:
        job = None
    return dict(application.to_row(), job=_job_with_employer(job) if job is not None else None)


def _failed(operation, exc):
    LOGGER.error("%s failed: %s", operation, exc)
    return DataAccessError(operation, exc)


class JobService:
    """Stateless gateway to the jobs table."""

    @staticmethod
    def list_active_jobs_with_employer():
        try:
            jobs = Job.objects.filter(is_active=True).select_related('employer').order_by(*NEWEST_FIRST)
            return [_job_with_employer(job) for job in jobs]
        except DatabaseError as exc:
            raise _failed('list_active_jobs_with_employer', exc) from exc

    @staticmethod
    def list_jobs_with_applications_for_employer(employer_id):
        applications = Prefetch(
            'applications',
            queryset=Application.objects.select_related('applicant').order_by(*NEWEST_FIRST)
        )
        try:
            jobs = Job.objects.filter(employer_id=employer_id).prefetch_related(applications).order_by(*NEWEST_FIRST)
            return [
                dict(job.to_row(), applications=[_application_with_applicant(app) for app in job.applications.all()])
                for job in jobs
            ]
        except DatabaseError as exc:
            raise _failed('list_jobs_with_applications_for_employer', exc) from exc

    @staticmethod
    def get_job(job_id):
        try:
            job = Job.objects.filter(pk=job_id).first()
        except DatabaseError as exc:
            raise _failed('get_job', exc) from exc
        return job.to_row() if job else None

    @staticmethod
    def upsert_job(employer_id, data, job_id=None):
        """Insert a new posting for employer_id, or update job_id in place."""
        values = {key: value for key, value in data.items() if key in JOB_COLUMNS}
        salary_min, salary_max = values.get('salary_min'), values.get('salary_max')
        if salary_min is not None and salary_max is not None and salary_min > salary_max:
            LOGGER.warning("Job salary range is inverted (%s > %s); saving as given", salary_min, salary_max)

        operation = 'upsert_job'
        try:
            with transaction.atomic():
                if job_id is None:
                    job = Job.objects.create(employer_id=employer_id, **values)
                else:
                    updated = Job.objects.filter(pk=job_id).update(updated_at=timezone.now(), **values)
                    if not updated:
                        raise DataAccessError(operation, Job.DoesNotExist(f"Job {job_id} not found"))
                    job = Job.objects.get(pk=job_id)
        except DatabaseError as exc:
            raise _failed(operation, exc) from exc
        return job.to_row()

    @staticmethod
    def update_job_status(job_id, is_active):
        try:
            updated = Job.objects.filter(pk=job_id).update(is_active=is_active, updated_at=timezone.now())
        except DatabaseError as exc:
            raise _failed('update_job_status', exc) from exc
        if not updated:
            LOGGER.warning("update_job_status matched no job %s", job_id)

    @staticmethod
    def delete_job(job_id):
        try:
            Job.objects.filter(pk=job_id).delete()
        except DatabaseError as exc:
            raise _failed('delete_job', exc) from exc


class ApplicationService:
    """Stateless gateway to the applications table."""

    @staticmethod
    def list_applications_with_job_for_applicant(applicant_id):
        try:
            applications = (
                Application.objects.filter(applicant_id=applicant_id)
                .select_related('job', 'job__employer')
                .order_by(*NEWEST_FIRST)
            )
            return [_application_with_job(app) for app in applications]
        except DatabaseError as exc:
            raise _failed('list_applications_with_job_for_applicant', exc) from exc

    @staticmethod
    def list_applied_job_ids(applicant_id):
        try:
            return set(Application.objects.filter(applicant_id=applicant_id).values_list('job_id', flat=True))
        except DatabaseError as exc:
            raise _failed('list_applied_job_ids', exc) from exc

    @staticmethod
    def get_application(application_id):
        try:
            application = Application.objects.filter(pk=application_id).first()
        except DatabaseError as exc:
            raise _failed('get_application', exc) from exc
        return application.to_row() if application else None

    @staticmethod
    def create_application(job_id, applicant_id, cover_letter=None):
        """
        Inserts a pending application. The (job, applicant) uniqueness is the
        store's to enforce; its violation comes back as DuplicateError.
        """
        operation = 'create_application'
        try:
            with transaction.atomic():
                application = Application.objects.create(
                    job_id=job_id,
                    applicant_id=applicant_id,
                    cover_letter=cover_letter or None,
                    status=Application.Status.PENDING
                )
        except IntegrityError as exc:
            try:
                duplicate = Application.objects.filter(job_id=job_id, applicant_id=applicant_id).exists()
            except DatabaseError as lookup_exc:
                raise _failed(operation, lookup_exc) from exc
            if duplicate:
                LOGGER.info("Applicant %s already applied to job %s", applicant_id, job_id)
                raise DuplicateError(operation, exc) from exc
            raise _failed(operation, exc) from exc
        except DatabaseError as exc:
            raise _failed(operation, exc) from exc
        LOGGER.info("Applicant %s applied to job %s", applicant_id, job_id)
        return application.to_row()

    @staticmethod
    def update_application_status(application_id, status):
        try:
            updated = Application.objects.filter(pk=application_id).update(status=status, updated_at=timezone.now())
        except DatabaseError as exc:
            raise _failed('update_application_status', exc) from exc
        if not updated:
            LOGGER.warning("update_application_status matched no application %s", application_id)
