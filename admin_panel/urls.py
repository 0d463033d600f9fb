from django.urls import path
from . import views

urlpatterns = [
    # Reports
    path('reports/', views.list_reports, name='list-reports'),
    path('report/<str:report_id>/', views.view_report, name='view-report'),
    path('report/<str:report_id>/export/csv/', views.export_report_csv, name='export-report-csv'),
]
