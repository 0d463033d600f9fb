from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('auth/', include('authentication.urls')),
    path('checklist/', include('tasks.urls')),
    path('reports/', include('reports.urls')),
    path('panel/', include('admin_panel.urls')),
]
