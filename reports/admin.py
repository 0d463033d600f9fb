from django.contrib import admin
from .models import Report, ReportTask


class ReportTaskInline(admin.TabularInline):
    model = ReportTask
    extra = 0
    fields = ('task_id', 'title', 'category', 'done', 'note')
    readonly_fields = fields
    can_delete = False


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ('id', 'owner', 'device_name', 'completion_pct', 'points', 'next_maintenance_at', 'created_at')
    list_filter = ('created_at', 'next_maintenance_at')
    search_fields = ('owner', 'device_name', 'user__email')
    readonly_fields = ('completion_pct', 'points', 'created_at')
    inlines = [ReportTaskInline]
