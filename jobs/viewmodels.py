"""
View-model shaping.

Pure functions from the joined rows returned by jobs.services to the frozen
structures each screen renders. A nested row that is missing (an orphaned
foreign key, a join the store could not resolve) leaves the nested attribute
as None, and the key is dropped from ``as_dict()``; it is never an error.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Mapping, Optional, Sequence, Tuple

NESTED_KEYS = frozenset({'employer', 'applicant', 'job', 'applications'})


def _plain(value):
    if isinstance(value, ViewModel):
        return value.as_dict()
    if isinstance(value, tuple):
        return [_plain(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    return value


class ViewModel:
    """Mixin for the dataclasses below."""

    def as_dict(self) -> dict:
        data = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if value is None and item.name in NESTED_KEYS:
                continue
            data[item.name] = _plain(value)
        return data


@dataclass(frozen=True)
class EmployerCard(ViewModel):
    id: int
    display_name: str
    full_name: str
    company_name: Optional[str]
    company_website: Optional[str]
    location: Optional[str]


@dataclass(frozen=True)
class ApplicantCard(ViewModel):
    id: int
    full_name: str
    email: str
    phone: Optional[str]
    location: Optional[str]
    bio: Optional[str]
    resume_url: Optional[str]
    skills: Tuple[str, ...]


@dataclass(frozen=True)
class ApplicationCard(ViewModel):
    id: int
    job_id: int
    applicant_id: int
    status: str
    cover_letter: Optional[str]
    created_at: Optional[datetime]
    applicant: Optional[ApplicantCard] = None
    job: Optional[JobCard] = None


@dataclass(frozen=True)
class JobCard(ViewModel):
    id: int
    employer_id: int
    title: str
    description: str
    job_type: str
    location: str
    salary_min: Optional[int]
    salary_max: Optional[int]
    salary_label: Optional[str]
    requirements: Tuple[str, ...]
    is_active: bool
    created_at: Optional[datetime]
    employer: Optional[EmployerCard] = None
    applications: Optional[Tuple[ApplicationCard, ...]] = None


@dataclass(frozen=True)
class EmployerDashboard(ViewModel):
    jobs: Tuple[JobCard, ...]
    active_jobs: int
    total_applications: int


@dataclass(frozen=True)
class SeekerDashboard(ViewModel):
    applications: Tuple[ApplicationCard, ...]
    pending: int
    reviewed: int
    accepted: int
    rejected: int


def salary_label(salary_min, salary_max):
    """'$50,000 - $80,000', 'From $50,000', 'Up to $80,000', or None."""
    if salary_min and salary_max:
        return f"${salary_min:,} - ${salary_max:,}"
    if salary_min:
        return f"From ${salary_min:,}"
    if salary_max:
        return f"Up to ${salary_max:,}"
    return None


def shape_employer(row: Optional[Mapping]) -> Optional[EmployerCard]:
    if not row:
        return None
    full_name = row.get('full_name') or ''
    return EmployerCard(
        id=row.get('id'),
        display_name=row.get('company_name') or full_name,
        full_name=full_name,
        company_name=row.get('company_name'),
        company_website=row.get('company_website'),
        location=row.get('location'),
    )


def shape_applicant(row: Optional[Mapping]) -> Optional[ApplicantCard]:
    if not row:
        return None
    return ApplicantCard(
        id=row.get('id'),
        full_name=row.get('full_name') or '',
        email=row.get('email') or '',
        phone=row.get('phone'),
        location=row.get('location'),
        bio=row.get('bio'),
        resume_url=row.get('resume_url'),
        skills=tuple(row.get('skills') or ()),
    )


def shape_application(row: Mapping) -> ApplicationCard:
    return ApplicationCard(
        id=row.get('id'),
        job_id=row.get('job_id'),
        applicant_id=row.get('applicant_id'),
        status=row.get('status'),
        cover_letter=row.get('cover_letter'),
        created_at=row.get('created_at'),
        applicant=shape_applicant(row.get('applicant')),
        job=shape_job(row['job']) if row.get('job') else None,
    )


def shape_job(row: Mapping) -> JobCard:
    applications = None
    if 'applications' in row:
        applications = tuple(shape_application(app) for app in row.get('applications') or ())
    return JobCard(
        id=row.get('id'),
        employer_id=row.get('employer_id'),
        title=row.get('title') or '',
        description=row.get('description') or '',
        job_type=row.get('job_type') or '',
        location=row.get('location') or '',
        salary_min=row.get('salary_min'),
        salary_max=row.get('salary_max'),
        salary_label=salary_label(row.get('salary_min'), row.get('salary_max')),
        requirements=tuple(row.get('requirements') or ()),
        is_active=bool(row.get('is_active')),
        created_at=row.get('created_at'),
        employer=shape_employer(row.get('employer')),
        applications=applications,
    )


def shape_job_listings(rows: Sequence[Mapping]) -> Tuple[JobCard, ...]:
    """Jobs screen: active jobs, each with its employer card."""
    return tuple(shape_job(row) for row in rows)


def shape_employer_dashboard(rows: Sequence[Mapping]) -> EmployerDashboard:
    jobs = tuple(shape_job(row) for row in rows)
    return EmployerDashboard(
        jobs=jobs,
        active_jobs=sum(1 for job in jobs if job.is_active),
        total_applications=sum(len(job.applications or ()) for job in jobs),
    )


def shape_seeker_dashboard(rows: Sequence[Mapping]) -> SeekerDashboard:
    applications = tuple(shape_application(row) for row in rows)
    statuses = [app.status for app in applications]
    return SeekerDashboard(
        applications=applications,
        pending=statuses.count('pending'),
        reviewed=statuses.count('reviewed'),
        accepted=statuses.count('accepted'),
        rejected=statuses.count('rejected'),
    )
