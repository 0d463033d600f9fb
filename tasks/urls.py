from django.urls import path
from . import views

urlpatterns = [
    path('', views.checklist_state, name='checklist'),
    path('toggle/', views.toggle_task, name='checklist-toggle'),
    path('note/', views.update_note, name='checklist-note'),
    path('reset/', views.reset_checklist, name='checklist-reset'),
]
