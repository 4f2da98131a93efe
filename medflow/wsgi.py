"""
WSGI config for the MedFlow project.

It exposes the WSGI callable as a module-level variable named ``application``.
Only the HTTP API is served this way; the WebSocket layer needs the ASGI
entrypoint in ``medflow.asgi``.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'medflow.settings')

application = get_wsgi_application()
