from django.urls import path
from .views import submit_report, my_reports

urlpatterns = [
    path('submit/', submit_report, name='submit-report'),
    path('mine/', my_reports, name='my-reports'),
]
