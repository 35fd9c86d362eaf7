from __future__ import annotations

import pytest
import requests

from weathercache.core.providers.base import (
    LocationNotFound,
    NetworkError,
    ParseError,
    ProviderError,
    QuotaExceeded,
    RequestConfig,
)
from weathercache.core.providers.weatherapi import WeatherApiClient


BASE_URL = "https://weatherapi.test/v1/current.json"


def make_client() -> WeatherApiClient:
    return WeatherApiClient(api_key="secret", base_url=BASE_URL, request_config=RequestConfig(timeout=2.0))


def current_payload(name: str = "London", temp: float = 15.0, text: str = "Cloudy") -> dict:
    return {
        "location": {"name": name, "region": "City of London, Greater London", "country": "United Kingdom"},
        "current": {"temp_c": temp, "temp_f": 59.0, "condition": {"text": text, "code": 1006}},
    }


def test_fetch_parses_current_conditions(requests_mock):
    requests_mock.get(BASE_URL, json=current_payload())

    response = make_client().fetch("London")

    assert response.location_name == "London"
    assert response.temperature_c == 15.0
    assert response.condition == "Cloudy"


def test_fetch_sends_key_and_query(requests_mock):
    requests_mock.get(BASE_URL, json=current_payload(name="New York"))

    make_client().fetch("  10001 ")

    assert requests_mock.call_count == 1
    assert requests_mock.last_request.qs == {"key": ["secret"], "q": ["10001"]}
    assert requests_mock.last_request.timeout == 2.0


def test_fetch_rejects_blank_query(requests_mock):
    with pytest.raises(ValueError):
        make_client().fetch("   ")
    assert requests_mock.call_count == 0


def test_missing_fields_raise_parse_error(requests_mock):
    requests_mock.get(BASE_URL, json={"location": {"name": "London"}})

    with pytest.raises(ParseError):
        make_client().fetch("London")


def test_non_json_body_raises_parse_error(requests_mock):
    requests_mock.get(BASE_URL, text="<html>maintenance</html>")

    with pytest.raises(ParseError):
        make_client().fetch("London")


def test_unknown_location_raises_location_not_found(requests_mock):
    requests_mock.get(
        BASE_URL,
        status_code=400,
        json={"error": {"code": 1006, "message": "No matching location found."}},
    )

    with pytest.raises(LocationNotFound) as excinfo:
        make_client().fetch("Atlantis")

    assert excinfo.value.status_code == 400


def test_quota_code_raises_quota_exceeded(requests_mock):
    requests_mock.get(
        BASE_URL,
        status_code=403,
        json={"error": {"code": 2007, "message": "API key has exceeded calls per month quota."}},
    )

    with pytest.raises(QuotaExceeded):
        make_client().fetch("London")


def test_rate_limit_status_raises_quota_exceeded(requests_mock):
    requests_mock.get(BASE_URL, status_code=429, text="slow down")

    with pytest.raises(QuotaExceeded):
        make_client().fetch("London")


def test_server_error_raises_provider_error(requests_mock):
    requests_mock.get(BASE_URL, status_code=502, text="bad gateway")

    with pytest.raises(ProviderError) as excinfo:
        make_client().fetch("London")

    assert not isinstance(excinfo.value, LocationNotFound)
    assert excinfo.value.status_code == 502


def test_invalid_key_is_a_provider_error(requests_mock):
    requests_mock.get(
        BASE_URL,
        status_code=401,
        json={"error": {"code": 2006, "message": "API key provided is invalid"}},
    )

    with pytest.raises(ProviderError) as excinfo:
        make_client().fetch("London")

    assert type(excinfo.value) is ProviderError


def test_timeout_raises_network_error(requests_mock):
    requests_mock.get(BASE_URL, exc=requests.exceptions.ConnectTimeout)

    with pytest.raises(NetworkError):
        make_client().fetch("London")


def test_connection_failure_raises_network_error(requests_mock):
    requests_mock.get(BASE_URL, exc=requests.exceptions.ConnectionError("refused"))

    with pytest.raises(NetworkError):
        make_client().fetch("London")
