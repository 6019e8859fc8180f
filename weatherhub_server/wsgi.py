"""WSGI entry point for the weatherhub service."""
from __future__ import annotations

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "weatherhub_server.settings")

application = get_wsgi_application()
