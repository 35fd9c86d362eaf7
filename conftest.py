from __future__ import annotations

import os

import django
import pytest
import requests_mock as requests_mock_lib


os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret")
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "weathercache.settings")
os.environ.setdefault("TESTING_MODE", "1")
os.environ.setdefault("WEATHER_API_KEY", "test-key")
os.environ.setdefault("WEATHER_API_BASE_URL", "https://weather.test/v1/current.json")

django.setup()


@pytest.fixture()
def requests_mock():
    with requests_mock_lib.Mocker(case_sensitive=True) as mocker:
        yield mocker
