"""
Client-side job filtering over an already fetched list.

Three independent predicates joined with AND. Each is case-insensitive and
an empty value matches everything, so the predicates commute and an empty
filter returns the input unchanged.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from .viewmodels import JobCard


@dataclass(frozen=True)
class JobFilter:
    search: str = ''
    job_type: str = ''
    location: str = ''

    @classmethod
    def from_params(cls, params) -> JobFilter:
        return cls(
            search=params.get('search') or '',
            job_type=params.get('job_type') or '',
            location=params.get('location') or '',
        )

    @property
    def is_empty(self) -> bool:
        return not (self.search or self.job_type or self.location)

    def matches(self, job: JobCard) -> bool:
        return (
            matches_search(job, self.search)
            and matches_job_type(job, self.job_type)
            and matches_location(job, self.location)
        )


def matches_search(job: JobCard, term: str) -> bool:
    if not term:
        return True
    term = term.lower()
    return term in job.title.lower() or term in job.description.lower()


def matches_job_type(job: JobCard, job_type: str) -> bool:
    return not job_type or job.job_type.lower() == job_type.lower()


def matches_location(job: JobCard, location: str) -> bool:
    return not location or location.lower() in job.location.lower()


def filter_jobs(jobs: Iterable[JobCard], job_filter: JobFilter) -> Tuple[JobCard, ...]:
    jobs = tuple(jobs)
    if job_filter.is_empty:
        return jobs
    return tuple(job for job in jobs if job_filter.matches(job))
