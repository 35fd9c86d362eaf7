"""Request and response serializers for the weather API."""
from __future__ import annotations

from rest_framework import serializers

from weathercache.core.models import CITY_MAX_LENGTH, ZIP_CODE_MAX_LENGTH


class WeatherQuerySerializer(serializers.Serializer):
    """Exactly one of ``city`` or ``zipCode`` must be supplied."""

    city = serializers.CharField(required=False, allow_blank=False, max_length=CITY_MAX_LENGTH)
    zipCode = serializers.CharField(required=False, allow_blank=False, max_length=ZIP_CODE_MAX_LENGTH)

    def validate(self, attrs):
        supplied = [name for name in ("city", "zipCode") if attrs.get(name)]
        if len(supplied) != 1:
            raise serializers.ValidationError("exactly one of city or zipCode query parameters is required")
        return attrs


class WeatherRecordSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    city = serializers.CharField(allow_null=True, read_only=True)
    zipCode = serializers.CharField(source="zip_code", allow_null=True, read_only=True)
    temperature = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
