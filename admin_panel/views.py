import csv
import io

from django.http import HttpResponse
from django.utils.timezone import localtime
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from authentication.access import IsChecklistAdmin
from reports.backends import get_data_backend
from reports.exceptions import BackendError
from reports.serializers import ReportSerializer, ReportTaskSerializer


# --- Helper: Safe datetime formatter ---
def format_datetime(dt):
    if not dt:
        return ''
    try:
        return localtime(dt).strftime("%d-%m-%Y %H:%M")
    except (TypeError, ValueError, AttributeError):
        return str(dt)


def load_report(report_id):
    """Return (report, tasks) or (None, []) when the report does not exist."""
    backend = get_data_backend()
    report = backend.get_report(report_id)
    if report is None:
        return None, []
    return report, backend.list_report_tasks(report_id)


# --- Report Management ---
@api_view(['GET'])
@permission_classes([IsChecklistAdmin])
def list_reports(request):
    try:
        reports = get_data_backend().list_reports()
    except BackendError as e:
        return Response({'error': str(e)}, status=502)
    return Response(ReportSerializer(reports, many=True).data)


@api_view(['GET'])
@permission_classes([IsChecklistAdmin])
def view_report(request, report_id):
    try:
        report, tasks = load_report(report_id)
    except BackendError as e:
        return Response({'error': str(e)}, status=502)
    if report is None:
        return Response({'error': 'Report not found'}, status=404)

    data = ReportSerializer(report).data
    data['tasks'] = ReportTaskSerializer(tasks, many=True).data
    return Response(data)


# --- Export Report as CSV ---
@api_view(['GET'])
@permission_classes([IsChecklistAdmin])
def export_report_csv(request, report_id):
    try:
        report, tasks = load_report(report_id)
    except BackendError as e:
        return Response({'error': str(e)}, status=502)
    if report is None:
        return Response({'error': 'Report not found'}, status=404)

    meta_info = [
        ('Report ID', report['id']),
        ('Owner', report.get('owner') or ''),
        ('Device Name', report.get('device_name') or ''),
        ('Completion %', report.get('completion_pct') or 0),
        ('Points', report.get('points') or 0),
        ('Next Maintenance', format_datetime(report.get('next_maintenance_at'))),
        ('Submitted At', format_datetime(report.get('created_at'))),
    ]
    rows = [{'section': 'Meta', 'label': k, 'value': v} for k, v in meta_info]

    for task in tasks:
        status = 'Done' if task.get('done') else 'Open'
        note = task.get('note')
        rows.append({
            'section': task.get('category', ''),
            'label': task.get('title', ''),
            'value': f"{status} - {note}" if note else status,
        })

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=['section', 'label', 'value'])
    writer.writeheader()
    for row in rows:
        writer.writerow(row)

    response = HttpResponse(buffer.getvalue(), content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename=report_{report["id"]}.csv'
    return response
