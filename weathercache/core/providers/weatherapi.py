"""WeatherAPI.com current conditions client."""
from __future__ import annotations

import logging
import os
from typing import Optional

from pydantic import ValidationError
from requests import Response

from .base import HttpWeatherClient, LocationNotFound, ParseError, QuotaExceeded
from .schemas import CurrentWeatherPayload, ErrorPayload
from ..abstractions import ProviderResponse

# https://www.weatherapi.com/docs/#intro-error-codes
NO_LOCATION_FOUND = 1006
QUOTA_EXCEEDED = 2007


class WeatherApiClient(HttpWeatherClient):
    """Resolve a city name or postal code to current conditions."""

    name = "weatherapi"
    base_url = "https://api.weatherapi.com/v1/current.json"

    def __init__(self, api_key: str, base_url: Optional[str] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.api_key = api_key
        self.base_url = base_url or self.base_url
        self._testing_mode = os.environ.get("TESTING_MODE", "0") == "1"
        self._log = logging.getLogger(self.__class__.__name__)

    def fetch(self, query: str) -> ProviderResponse:
        query = (query or "").strip()
        if not query:
            raise ValueError("query must be a non-empty string")

        params = {"key": self.api_key, "q": query}
        response = self._request("GET", self.base_url, params=params)
        if self._testing_mode:
            self._log.info("WeatherAPI %s -> %s %s", query, response.status_code, response.text[:500])

        data = self._json(response)
        try:
            payload = CurrentWeatherPayload.model_validate(data)
        except ValidationError as exc:
            self._log.error("Unexpected payload for %s: %s", query, exc)
            raise ParseError("missing location or current weather fields") from exc

        return ProviderResponse(
            location_name=payload.location.name,
            temperature_c=payload.current.temp_c,
            condition=payload.current.condition.text,
        )

    def _handle_response(self, response: Response) -> Response:
        if response.status_code in (400, 401, 403):
            code = self._error_code(response)
            if code == NO_LOCATION_FOUND:
                self._log.info("No location matches the query")
                raise LocationNotFound("no matching location found", status_code=response.status_code)
            if code == QUOTA_EXCEEDED:
                self._log.warning("Quota exceeded: %s", response.text)
                raise QuotaExceeded("quota exceeded", status_code=response.status_code)
        return super()._handle_response(response)

    @staticmethod
    def _error_code(response: Response) -> Optional[int]:
        try:
            return ErrorPayload.model_validate(response.json()).error.code
        except (ValueError, ValidationError):
            return None


__all__ = ["WeatherApiClient"]
