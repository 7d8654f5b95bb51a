"""
WSGI config for the aura project.

It exposes the WSGI callable as a module-level variable named ``application``.
Plain HTTP deployments use this entry point; WebSocket slot updates need
the ASGI application in :mod:`aura.asgi`.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

# Set the default settings module for the 'django' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'aura.settings')

# Obtain the WSGI application for use by the server
application = get_wsgi_application()
