"""
WSGI config for the dinefloor project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'dinefloor.settings')

application = get_wsgi_application()
