"""
ASGI config for tiffin_hub project.

It exposes the ASGI callable as a module-level variable named ``application``.
"""

# tiffin_hub/asgi.py
import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'tiffin_hub.settings')

from django.core.asgi import get_asgi_application

application = get_asgi_application()
