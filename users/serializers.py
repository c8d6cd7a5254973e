from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password

from jobboard_core.fields import DelimitedListField
from .domain import EMPLOYER, JOB_SEEKER
from .models import Profile

User = get_user_model()


class RegistrationSerializer(serializers.ModelSerializer):
    """
    Sign-up. Creates the auth identity only; the profile (and with it the
    role) is created on the profile-setup screen after the first sign-in.
    """
    password = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'full_name', 'password']
        read_only_fields = ['id']

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        return User.objects.create_user(
            email=validated_data['email'],
            full_name=validated_data.get('full_name', ''),
            password=validated_data['password']
        )


class SignInSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Profile.UserType.choices)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class SignOutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False, allow_blank=True)


class ProfileSetupSerializer(serializers.Serializer):
    """
    First-time profile creation. Only the chosen role's columns are kept;
    the other role's columns are stored empty.
    """
    user_type = serializers.ChoiceField(
        choices=Profile.UserType.choices,
        error_messages={'invalid_choice': 'Please select account type', 'required': 'Please select account type'}
    )
    full_name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    bio = serializers.CharField(required=False, allow_blank=True)
    company_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    company_website = serializers.URLField(required=False, allow_blank=True)
    skills = DelimitedListField(required=False)

    def validate(self, data):
        user_type = data['user_type']
        if user_type == EMPLOYER and not data.get('company_name'):
            raise serializers.ValidationError({'company_name': ['Company name is required for employers.']})

        row = {
            'user_type': user_type,
            'full_name': data['full_name'],
            'email': data['email'],
            'phone': data.get('phone') or None,
            'location': data.get('location') or None,
            'bio': data.get('bio') or None,
            'resume_url': None,
            'company_name': None,
            'company_website': None,
            'skills': [],
        }
        if user_type == EMPLOYER:
            row['company_name'] = data['company_name']
            row['company_website'] = data.get('company_website') or None
        elif user_type == JOB_SEEKER:
            row['skills'] = data.get('skills', [])
        return row


class ProfileUpdateSerializer(serializers.Serializer):
    """Partial profile edit. Which keys may appear is decided by users.rules."""
    full_name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, allow_null=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    bio = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    resume_url = serializers.URLField(required=False, allow_blank=True, allow_null=True)
    company_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    company_website = serializers.URLField(required=False, allow_blank=True, allow_null=True)
    skills = DelimitedListField(required=False)

    def validate(self, data):
        # Blank optional text is stored as NULL, like the setup form does
        return {
            key: (value or None) if key not in ('full_name', 'skills', 'company_name') else value
            for key, value in data.items()
        }
