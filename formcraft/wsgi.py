"""
WSGI config for the FormCraft backend.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'formcraft.settings')

application = get_wsgi_application()
