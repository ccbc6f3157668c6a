"""
WSGI config for the streakboard project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'streakboard.settings')

application = get_wsgi_application()
