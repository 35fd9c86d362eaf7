"""API URL configuration."""
from __future__ import annotations

from django.urls import path

from weathercache.api.views import HealthView, WeatherView

urlpatterns = [
    path("weather", WeatherView.as_view(), name="weather"),
    path("admin/health", HealthView.as_view(), name="admin-health"),
]
