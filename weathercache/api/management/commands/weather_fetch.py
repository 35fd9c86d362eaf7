"""Management command to look up weather using the same stack as the API."""
from __future__ import annotations

import json
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from weathercache.api.views import get_weather_service, serialize_result


class Command(BaseCommand):
    help = "Look up current weather for a city or zip code, fetching it on a cache miss"

    def add_arguments(self, parser) -> None:  # noqa: D401
        group = parser.add_mutually_exclusive_group(required=True)
        group.add_argument("--city", type=str, help="City name")
        group.add_argument("--zip", dest="zip_code", type=str, help="Postal code")

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: D401
        city = options.get("city")
        zip_code = options.get("zip_code")
        service = get_weather_service()

        try:
            result = service.lookup_city(city) if city else service.lookup_zip_code(zip_code)
        except ValueError as exc:
            raise CommandError(str(exc)) from exc

        if not result.found:
            raise CommandError(f"No weather available ({result.outcome.value})")
        self.stdout.write(json.dumps(serialize_result(result), ensure_ascii=False))
