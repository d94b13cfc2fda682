"""Pydantic schemas for the HTTP API layer and the audit log."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.records import SpeedUnit, TemperatureUnit, WeatherReading


class AuditOutcome(str, Enum):
    """Final state of a weather request."""

    success = "success"
    failure = "failure"


class TemperatureSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: float
    unit: TemperatureUnit


class WindSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    speed: float
    unit: SpeedUnit


class WeatherReadingResponse(BaseModel):
    """Canonical reading returned to clients, always in Celsius and km/h."""

    model_config = ConfigDict(frozen=True)

    city: str
    temperature: TemperatureSchema
    condition: str
    wind: WindSchema

    @classmethod
    def from_reading(cls, reading: WeatherReading) -> "WeatherReadingResponse":
        return cls(
            city=reading.city,
            temperature=TemperatureSchema(
                value=reading.temperature.value, unit=reading.temperature.unit
            ),
            condition=reading.condition,
            wind=WindSchema(speed=reading.wind.speed, unit=reading.wind.unit),
        )


class AuditRecord(BaseModel):
    """One request's outcome. Written once and never updated."""

    model_config = ConfigDict(frozen=True)

    record_id: str
    city: str
    source: str
    timestamp: datetime = Field(..., description="UTC time the request completed.")
    outcome: AuditOutcome
    reading: Optional[WeatherReadingResponse] = None
    error_kind: Optional[str] = Field(
        default=None, description="Error kind, e.g. provider_failed:city_not_found."
    )
    provider_error: Optional[str] = None


class ErrorDetail(BaseModel):
    """Safe error description exposed to clients."""

    error: str
    provider_error: Optional[str] = None
    message: str


class ProvidersResponse(BaseModel):
    sources: List[str]
    default: str


class AuditListResponse(BaseModel):
    records: List[AuditRecord] = Field(default_factory=list)
