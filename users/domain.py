"""
Typed profile variants.

The profiles table stores every role's columns on one row. Above the data
access layer the row is lifted into exactly one variant, so a seeker never
carries company fields and an employer never carries skills.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import ClassVar, Mapping, Optional, Tuple, Union

JOB_SEEKER = 'job_seeker'
EMPLOYER = 'employer'
ROLES = (JOB_SEEKER, EMPLOYER)


@dataclass(frozen=True)
class Identity:
    """Authenticated identity as exposed by the auth backend."""

    id: int
    email: str


@dataclass(frozen=True)
class _BaseProfile:
    id: int
    full_name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    resume_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    role: ClassVar[str] = ''

    @property
    def is_seeker(self) -> bool:
        return self.role == JOB_SEEKER

    @property
    def is_employer(self) -> bool:
        return self.role == EMPLOYER

    @property
    def display_name(self) -> str:
        return self.full_name

    def as_dict(self) -> dict:
        data = {'user_type': self.role}
        for item in fields(self):
            value = getattr(self, item.name)
            data[item.name] = list(value) if isinstance(value, tuple) else value
        return data


@dataclass(frozen=True)
class SeekerProfile(_BaseProfile):
    skills: Tuple[str, ...] = field(default_factory=tuple)

    role: ClassVar[str] = JOB_SEEKER


@dataclass(frozen=True)
class EmployerProfile(_BaseProfile):
    company_name: Optional[str] = None
    company_website: Optional[str] = None

    role: ClassVar[str] = EMPLOYER

    @property
    def display_name(self) -> str:
        return self.company_name or self.full_name


ProfileVariant = Union[SeekerProfile, EmployerProfile]

_COMMON = ('id', 'full_name', 'email', 'phone', 'location', 'bio', 'resume_url', 'created_at', 'updated_at')


def profile_from_row(row: Optional[Mapping]) -> Optional[ProfileVariant]:
    """Lift a profiles row into its variant. Returns None for a missing row."""
    if not row:
        return None
    common = {name: row.get(name) for name in _COMMON}
    if not common['full_name']:
        common['full_name'] = ''
    user_type = row.get('user_type')
    if user_type == JOB_SEEKER:
        return SeekerProfile(skills=tuple(row.get('skills') or ()), **common)
    if user_type == EMPLOYER:
        return EmployerProfile(
            company_name=row.get('company_name'),
            company_website=row.get('company_website'),
            **common
        )
    raise ValueError(f"Unknown user_type: {user_type!r}")
