from django.db import models
from django.utils.translation import gettext_lazy as _

from users.models import Profile


class Job(models.Model):
    class JobType(models.TextChoices):
        FULL_TIME = 'full-time', _('Full-time')
        PART_TIME = 'part-time', _('Part-time')
        CONTRACT = 'contract', _('Contract')
        INTERNSHIP = 'internship', _('Internship')

    employer = models.ForeignKey(
        Profile,
        on_delete=models.CASCADE,
        related_name='jobs'
    )
    title = models.CharField(max_length=255)
    description = models.TextField()
    requirements = models.JSONField(default=list, blank=True)  # Ordered list of requirement lines

    job_type = models.CharField(
        max_length=20,
        choices=JobType.choices,
        default=JobType.FULL_TIME
    )
    location = models.CharField(max_length=255)

    # Advisory range: min <= max is not enforced
    salary_min = models.PositiveIntegerField(null=True, blank=True)
    salary_max = models.PositiveIntegerField(null=True, blank=True)

    # Inactive postings stay visible to their employer only
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'jobs'
        ordering = ['-created_at', '-id']

    ROW_FIELDS = (
        'id', 'employer_id', 'title', 'description', 'requirements', 'job_type',
        'location', 'salary_min', 'salary_max', 'is_active', 'created_at', 'updated_at',
    )

    def to_row(self):
        row = {name: getattr(self, name) for name in self.ROW_FIELDS}
        row['requirements'] = list(self.requirements or [])
        return row

    def __str__(self):
        return f"{self.title} ({'active' if self.is_active else 'inactive'})"


class Application(models.Model):
    class Status(models.TextChoices):
        PENDING = 'pending', _('Pending')
        REVIEWED = 'reviewed', _('Reviewed')
        ACCEPTED = 'accepted', _('Accepted')
        REJECTED = 'rejected', _('Rejected')

    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='applications')
    applicant = models.ForeignKey(
        Profile,
        on_delete=models.CASCADE,
        related_name='applications'
    )
    cover_letter = models.TextField(blank=True, null=True)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'applications'
        unique_together = ('job', 'applicant')  # One application per seeker per job
        ordering = ['-created_at', '-id']

    ROW_FIELDS = ('id', 'job_id', 'applicant_id', 'status', 'cover_letter', 'created_at', 'updated_at')

    def to_row(self):
        return {name: getattr(self, name) for name in self.ROW_FIELDS}

    def __str__(self):
        return f"{self.applicant_id} -> {self.job_id} ({self.status})"
