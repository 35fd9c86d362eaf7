from .base import (
    FetchError,
    HttpWeatherClient,
    LocationNotFound,
    NetworkError,
    ParseError,
    ProviderError,
    QuotaExceeded,
    RequestConfig,
)
from .weatherapi import WeatherApiClient

__all__ = [
    "FetchError",
    "HttpWeatherClient",
    "LocationNotFound",
    "NetworkError",
    "ParseError",
    "ProviderError",
    "QuotaExceeded",
    "RequestConfig",
    "WeatherApiClient",
]
