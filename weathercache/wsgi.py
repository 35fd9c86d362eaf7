"""WSGI entry point for the weather cache service."""
from __future__ import annotations

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "weathercache.settings")

application = get_wsgi_application()

from weathercache.api.views import start_background_refresher  # noqa: E402  (needs configured apps)

start_background_refresher()
