"""REST API views for weather information."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from weathercache.api.serializers import WeatherQuerySerializer, WeatherRecordSerializer
from weathercache.core import models
from weathercache.core.health import HealthRegistry
from weathercache.core.locks import KeyedLocks
from weathercache.core.providers import RequestConfig, WeatherApiClient
from weathercache.core.services.lookup import LookupOutcome, LookupResult, WeatherLookupService
from weathercache.core.services.refresher import WeatherRefresher


logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_health_registry() -> HealthRegistry:
    return HealthRegistry()


@lru_cache(maxsize=1)
def get_weather_client() -> WeatherApiClient:
    if not settings.WEATHER_API_KEY:
        raise ImproperlyConfigured("WEATHER_API_KEY must be set to query the weather provider")
    return WeatherApiClient(
        api_key=settings.WEATHER_API_KEY,
        base_url=settings.WEATHER_API_BASE_URL,
        request_config=RequestConfig(timeout=settings.WEATHER_API_TIMEOUT),
    )


@lru_cache(maxsize=1)
def get_record_store() -> models.SqlWeatherRecordStore:
    models.configure_engine(settings.DATABASE_URL)
    return models.SqlWeatherRecordStore()


@lru_cache(maxsize=1)
def get_keyed_locks() -> KeyedLocks:
    return KeyedLocks()


@lru_cache(maxsize=1)
def get_weather_service() -> WeatherLookupService:
    return WeatherLookupService(
        client=get_weather_client(),
        store=get_record_store(),
        locks=get_keyed_locks(),
        health=get_health_registry(),
    )


@lru_cache(maxsize=1)
def get_refresher() -> WeatherRefresher:
    return WeatherRefresher(
        client=get_weather_client(),
        store=get_record_store(),
        locks=get_keyed_locks(),
        interval_ms=settings.WEATHER_REFRESH_INTERVAL_MS,
        health=get_health_registry(),
    )


def start_background_refresher() -> Optional[WeatherRefresher]:
    """Start the shared refresher thread when ``WEATHER_REFRESH_ON_STARTUP`` is set.

    Called from the WSGI entry point only, so management commands never spawn
    a second sweeping thread.
    """
    if not settings.WEATHER_REFRESH_ON_STARTUP:
        return None
    refresher = get_refresher()
    logger.info("Starting background weather refresher")
    refresher.start()
    return refresher


def serialize_result(result: LookupResult) -> dict:
    payload = dict(WeatherRecordSerializer(result.record).data)
    payload["outcome"] = result.outcome.value
    return payload


class WeatherView(APIView):
    """Look up current weather by city name or zip code."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):  # noqa: D401
        """Return the stored or freshly fetched record for the requested location."""
        query = WeatherQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(
                {"detail": "exactly one of city or zipCode query parameters is required", "errors": query.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        service = get_weather_service()
        city = query.validated_data.get("city")
        if city:
            result = service.lookup_city(city)
        else:
            result = service.lookup_zip_code(query.validated_data["zipCode"])

        if result.outcome is LookupOutcome.NOT_FOUND:
            return Response({"detail": "No weather found for the requested location"}, status=status.HTTP_404_NOT_FOUND)
        if result.outcome is LookupOutcome.PROVIDER_UNAVAILABLE:
            return Response(
                {"detail": "Weather provider is unavailable, try again later"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return Response(serialize_result(result), status=status.HTTP_200_OK)


class HealthView(APIView):
    """Serve lookup and refresh health information for operators."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):  # noqa: D401
        return Response(get_health_registry().snapshot(), status=status.HTTP_200_OK)
