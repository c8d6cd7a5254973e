from rest_framework import serializers


class DelimitedListField(serializers.ListField):
    """
    Accepts either a JSON list or the single text value a form field produces
    ("Python, Django" or one entry per line) and stores a list of strings.
    """

    def __init__(self, *args, separator=',', **kwargs):
        self.separator = separator
        kwargs.setdefault('child', serializers.CharField())
        super().__init__(*args, **kwargs)

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = [part.strip() for part in data.split(self.separator) if part.strip()]
        return super().to_internal_value(data)
