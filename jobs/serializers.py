from rest_framework import serializers

from jobboard_core.fields import DelimitedListField
from .models import Application, Job


class JobFormSerializer(serializers.Serializer):
    """Job posting modal. Requirements arrive one per line."""
    title = serializers.CharField(max_length=255)
    description = serializers.CharField()
    job_type = serializers.ChoiceField(choices=Job.JobType.choices)
    location = serializers.CharField(max_length=255)
    salary_min = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    salary_max = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    requirements = DelimitedListField(separator='\n', required=False)

    def to_internal_value(self, data):
        # Empty salary inputs mean "not given"
        data = data.copy()
        for key in ('salary_min', 'salary_max'):
            if isinstance(data.get(key), str) and not data[key].strip():
                data[key] = None
        return super().to_internal_value(data)


class ApplicationFormSerializer(serializers.Serializer):
    cover_letter = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ApplicationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Application.Status.choices)


class JobFilterSerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)
    job_type = serializers.ChoiceField(choices=Job.JobType.choices, required=False, allow_blank=True)
    location = serializers.CharField(required=False, allow_blank=True)
