"""
WSGI config for the orderflow project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'orderflow.config.settings')

application = get_wsgi_application()
