"""Payload schemas for the WeatherAPI ``current.json`` endpoint."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, field_validator

__all__ = ["CurrentWeatherPayload", "ErrorPayload"]


class Condition(BaseModel):
    text: str

    @field_validator("text")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("condition text must not be blank")
        return value


class Current(BaseModel):
    temp_c: float
    condition: Condition


class Location(BaseModel):
    name: str
    region: Optional[str] = None
    country: Optional[str] = None


class CurrentWeatherPayload(BaseModel):
    """The subset of a successful response the service consumes."""

    location: Location
    current: Current


class ErrorDetail(BaseModel):
    code: int
    message: str = ""


class ErrorPayload(BaseModel):
    """Body returned alongside 4xx statuses, e.g. ``{"error": {"code": 1006}}``."""

    error: ErrorDetail
