"""
WSGI config for the maintenance checklist project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'maintenance.settings')

application = get_wsgi_application()
