"""Cache-or-fetch lookups over the weather record store."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..abstractions import (
    KeyKind,
    ProviderResponse,
    WeatherClient,
    WeatherRecord,
    WeatherRecordStore,
    format_temperature,
    lookup_key,
)
from ..health import HealthRegistry
from ..locks import KeyedLocks
from ..providers.base import FetchError, LocationNotFound


logger = logging.getLogger(__name__)


class LookupOutcome(str, Enum):
    HIT = "hit"
    FETCHED = "fetched"
    NOT_FOUND = "not_found"
    PROVIDER_UNAVAILABLE = "provider_unavailable"


@dataclass(frozen=True)
class LookupResult:
    outcome: LookupOutcome
    record: Optional[WeatherRecord] = None
    error: Optional[FetchError] = None

    @property
    def found(self) -> bool:
        return self.record is not None


def build_record(kind: KeyKind, query: str, response: ProviderResponse) -> WeatherRecord:
    """Map a provider response onto a new record keyed by ``query``."""

    zip_code = query if kind is KeyKind.ZIP_CODE else None
    return WeatherRecord(
        city=response.location_name or (None if zip_code else query),
        zip_code=zip_code,
        query=query,
        temperature=format_temperature(response.temperature_c),
        description=response.condition,
    )


class WeatherLookupService:
    """Answer lookups from the store, fetching and persisting on a miss."""

    def __init__(
        self,
        client: WeatherClient,
        store: WeatherRecordStore,
        locks: Optional[KeyedLocks] = None,
        health: Optional[HealthRegistry] = None,
    ) -> None:
        self._client = client
        self._store = store
        self._locks = locks or KeyedLocks()
        self._health = health

    # Public API ---------------------------------------------------------
    def get_by_city(self, city: str) -> Optional[WeatherRecord]:
        return self.lookup_city(city).record

    def get_by_zip_code(self, zip_code: str) -> Optional[WeatherRecord]:
        return self.lookup_zip_code(zip_code).record

    def lookup_city(self, city: str) -> LookupResult:
        return self._lookup(KeyKind.CITY, city)

    def lookup_zip_code(self, zip_code: str) -> LookupResult:
        return self._lookup(KeyKind.ZIP_CODE, zip_code)

    # Helpers ------------------------------------------------------------
    def _lookup(self, kind: KeyKind, value: str) -> LookupResult:
        query = (value or "").strip()
        if not query:
            raise ValueError(f"{kind.value} must be a non-empty string")

        result = self._resolve(kind, query)
        if self._health is not None:
            self._health.record_lookup(result.outcome.value)
        return result

    def _resolve(self, kind: KeyKind, query: str) -> LookupResult:
        cached = self._find(kind, query)
        if cached is not None:
            return LookupResult(LookupOutcome.HIT, cached)

        with self._locks.hold(lookup_key(kind, query)):
            # A concurrent miss for the same key may have filled the store.
            cached = self._find(kind, query)
            if cached is not None:
                return LookupResult(LookupOutcome.HIT, cached)

            try:
                response = self._client.fetch(query)
            except LocationNotFound as exc:
                logger.info("Provider %s knows no location for %s=%r", self._client.name, kind.value, query)
                return LookupResult(LookupOutcome.NOT_FOUND, error=exc)
            except FetchError as exc:
                logger.warning("Weather provider %s failed for %s=%r: %s", self._client.name, kind.value, query, exc)
                if self._health is not None:
                    self._health.record_provider_error(type(exc).__name__)
                return LookupResult(LookupOutcome.PROVIDER_UNAVAILABLE, error=exc)

            record = self._store.save(build_record(kind, query, response))
            logger.info("Stored weather for %s=%r (id=%s)", kind.value, query, record.id)
            return LookupResult(LookupOutcome.FETCHED, record)

    def _find(self, kind: KeyKind, query: str) -> Optional[WeatherRecord]:
        if kind is KeyKind.CITY:
            return self._store.find_by_city(query)
        return self._store.find_by_zip_code(query)


__all__ = ["LookupOutcome", "LookupResult", "WeatherLookupService", "build_record"]
