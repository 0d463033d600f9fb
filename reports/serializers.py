from rest_framework import serializers

from .submission import ReportDraft, parse_maintenance_date


class ReportSubmitSerializer(serializers.Serializer):
    owner = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    device_name = serializers.CharField(max_length=255, required=False, allow_blank=True, trim_whitespace=False, default='')
    next_maintenance_at = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)

    def validate_next_maintenance_at(self, value):
        try:
            parse_maintenance_date(value)
        except ValueError:
            raise serializers.ValidationError("Enter a valid date (YYYY-MM-DD) or date/time.")
        return value

    def to_draft(self):
        return ReportDraft(**self.validated_data)


class ReportSerializer(serializers.Serializer):
    id = serializers.ReadOnlyField()
    owner = serializers.CharField(allow_null=True)
    device_name = serializers.CharField(allow_null=True)
    next_maintenance_at = serializers.DateTimeField(allow_null=True)
    completion_pct = serializers.IntegerField()
    points = serializers.IntegerField()
    created_at = serializers.DateTimeField()


class ReportTaskSerializer(serializers.Serializer):
    task_id = serializers.CharField()
    title = serializers.CharField()
    category = serializers.CharField()
    done = serializers.BooleanField()
    note = serializers.CharField(allow_null=True)
