"""Core abstractions for the weather domain."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol


class KeyKind(str, Enum):
    """Which field a record was originally looked up by."""

    CITY = "city"
    ZIP_CODE = "zip"


def lookup_key(kind: KeyKind, value: str) -> str:
    """Return the store-wide unique key for a lookup.

    City names compare case-insensitively, zip codes compare verbatim.
    """

    value = value.strip()
    if kind is KeyKind.CITY:
        value = value.casefold()
    return f"{kind.value}:{value}"


def format_temperature(temperature_c: float) -> str:
    return f"{float(temperature_c)}°C"


@dataclass(slots=True)
class ProviderResponse:
    """Current conditions as reported by the provider."""

    location_name: str
    temperature_c: float
    condition: str


@dataclass
class WeatherRecord:
    """Last known weather for one location."""

    city: Optional[str]
    zip_code: Optional[str]
    temperature: str
    description: str
    id: Optional[int] = None
    query: Optional[str] = None  # the city or zip code the record was first looked up by
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.city and not self.zip_code:
            raise ValueError("a weather record needs a city or a zip code")
        if self.query is None:
            self.query = self.zip_code or self.city

    @property
    def key_kind(self) -> KeyKind:
        return KeyKind.ZIP_CODE if self.zip_code else KeyKind.CITY

    @property
    def lookup_key(self) -> str:
        return lookup_key(self.key_kind, self.query)  # type: ignore[arg-type]


class WeatherClient(Protocol):
    """A data source able to resolve a city name or zip code to current weather."""

    name: str

    def fetch(self, query: str) -> ProviderResponse:
        """Fetch current conditions, raising ``FetchError`` on any failure."""
        ...


class WeatherRecordStore(Protocol):
    """Persistence for weather records, keyed by city or zip code."""

    def find_by_city(self, city: str) -> Optional[WeatherRecord]:
        ...

    def find_by_zip_code(self, zip_code: str) -> Optional[WeatherRecord]:
        ...

    def save(self, record: WeatherRecord) -> WeatherRecord:
        """Insert a new record or overwrite the one sharing its id."""
        ...

    def find_all(self) -> List[WeatherRecord]:
        ...
