from django.conf import settings
from django.db import models
from django.utils import timezone


class Report(models.Model):
    """
    Snapshot of a user's maintenance checklist at submission time.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='reports',
        null=True,
        blank=True
    )
    owner = models.CharField(max_length=255, blank=True, null=True)
    device_name = models.CharField(max_length=255, blank=True, null=True)
    next_maintenance_at = models.DateTimeField(blank=True, null=True)
    completion_pct = models.PositiveSmallIntegerField(default=0)
    points = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Report #{self.id} by {self.owner or 'Unknown'} ({self.completion_pct}%)"


class ReportTask(models.Model):
    report = models.ForeignKey(
        Report,
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    task_id = models.CharField(max_length=100)
    title = models.CharField(max_length=255)
    category = models.CharField(max_length=50)
    done = models.BooleanField(default=False)
    note = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.task_id} for Report #{self.report_id}"
