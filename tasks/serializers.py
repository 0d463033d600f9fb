from rest_framework import serializers


class TaskSerializer(serializers.Serializer):
    id = serializers.CharField()
    title = serializers.CharField()
    category = serializers.CharField()
    help = serializers.CharField(allow_null=True)
    link = serializers.CharField(allow_null=True)
    done = serializers.BooleanField()
    note = serializers.CharField(allow_null=True, allow_blank=True)


class CompletionSerializer(serializers.Serializer):
    done = serializers.IntegerField()
    total = serializers.IntegerField()
    pct = serializers.IntegerField()


class ChecklistSerializer(serializers.Serializer):
    tasks = TaskSerializer(many=True)
    completion = CompletionSerializer()
    points = serializers.IntegerField()
    badges = serializers.ListField(child=serializers.CharField())


class ToggleTaskSerializer(serializers.Serializer):
    task_id = serializers.CharField()


class TaskNoteSerializer(serializers.Serializer):
    task_id = serializers.CharField()
    note = serializers.CharField(allow_blank=True, allow_null=True, trim_whitespace=False)
