"""Base Django settings for the weather cache service."""
from __future__ import annotations

from pathlib import Path
import os

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent


def env(name: str, default: str | None = None) -> str:
    """Fetch environment variables while allowing explicit defaults."""

    value = os.environ.get(name, default)
    if value is None:
        raise ImproperlyConfigured(f"Environment variable {name} is required")
    return value


SECRET_KEY = env("DJANGO_SECRET_KEY")
DEBUG = os.environ.get("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = os.environ.get("DJANGO_ALLOWED_HOSTS", "*").split(",")

INSTALLED_APPS = [
    "rest_framework",
    "weathercache.api",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "weathercache.urls"

WSGI_APPLICATION = "weathercache.wsgi.application"

# Weather records live in their own DB-API store, not in the Django ORM.
DATABASE_URL = os.environ.get("DATABASE_URL", f"sqlite:///{BASE_DIR / 'weathercache.db'}")

WEATHER_API_BASE_URL = os.environ.get("WEATHER_API_BASE_URL", "https://api.weatherapi.com/v1/current.json")
WEATHER_API_KEY = os.environ.get("WEATHER_API_KEY", "")
WEATHER_API_TIMEOUT = float(os.environ.get("WEATHER_API_TIMEOUT", "5"))
WEATHER_REFRESH_INTERVAL_MS = int(os.environ.get("WEATHER_REFRESH_INTERVAL_MS", "3600000"))
WEATHER_REFRESH_ON_STARTUP = os.environ.get("WEATHER_REFRESH_ON_STARTUP", "0") == "1"

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "UNAUTHENTICATED_USER": None,
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "weathercache": {
            "handlers": ["console"],
            "level": os.environ.get("WEATHER_LOG_LEVEL", "INFO"),
        },
    },
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True
