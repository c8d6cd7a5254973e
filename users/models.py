from django.db import models
from django.conf import settings
from django.contrib.auth.models import AbstractUser, UserManager as DjangoUserManager
from django.utils.translation import gettext_lazy as _


class UserManager(DjangoUserManager):
    """Email is the login name; username mirrors it."""

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('username', email)
        return super().create_user(email=email, password=password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('username', email)
        return super().create_superuser(email=email, password=password, **extra_fields)


class User(AbstractUser):
    """
    Auth identity. Carries no role: the role lives on the Profile row,
    which is created in a separate step after the first sign-in.
    """
    full_name = models.CharField(_("Full Name"), max_length=255, blank=True)
    email = models.EmailField(_("Email Address"), unique=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    def __str__(self):
        return self.email


class Profile(models.Model):
    """
    One row per identity. Role-specific columns share the row; which of them
    are meaningful is decided by user_type (see users.domain).
    """

    class UserType(models.TextChoices):
        JOB_SEEKER = 'job_seeker', _('Job Seeker')
        EMPLOYER = 'employer', _('Employer')

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='profile'
    )
    user_type = models.CharField(max_length=20, choices=UserType.choices)

    full_name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=30, blank=True, null=True)
    location = models.CharField(max_length=255, blank=True, null=True)
    bio = models.TextField(blank=True, null=True)
    resume_url = models.URLField(blank=True, null=True)

    # Job seekers only
    skills = models.JSONField(default=list, blank=True)  # e.g. ["Python", "Django"]

    # Employers only
    company_name = models.CharField(max_length=255, blank=True, null=True)
    company_website = models.URLField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'profiles'

    ROW_FIELDS = (
        'user_type', 'full_name', 'email', 'phone', 'location', 'bio',
        'resume_url', 'skills', 'company_name', 'company_website',
        'created_at', 'updated_at',
    )

    def to_row(self):
        """Plain dict in the shape the store returns for a profiles row."""
        row = {'id': self.pk}
        for name in self.ROW_FIELDS:
            row[name] = getattr(self, name)
        row['skills'] = list(self.skills or [])
        return row

    def __str__(self):
        return f"{self.full_name} ({self.user_type})"
