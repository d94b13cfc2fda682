"""Conversion of provider-native payloads into canonical readings."""

from __future__ import annotations

from typing import Callable, Dict

from models.records import (
    ProviderKind,
    RawWeatherPayload,
    SpeedUnit,
    Temperature,
    TemperatureUnit,
    WeatherReading,
    Wind,
)

KMH_PER_MPH = 1.60934
KMH_PER_MS = 3.6
KELVIN_OFFSET = 273.15


def fahrenheit_to_celsius(value: float) -> float:
    return (value - 32) * 5 / 9


def kelvin_to_celsius(value: float) -> float:
    return value - KELVIN_OFFSET


def mph_to_kmh(value: float) -> float:
    return value * KMH_PER_MPH


def ms_to_kmh(value: float) -> float:
    return value * KMH_PER_MS


def _reading(city: str, celsius: float, condition: str, kmh: float) -> WeatherReading:
    return WeatherReading(
        city=city,
        temperature=Temperature(value=round(celsius, 2), unit=TemperatureUnit.C),
        condition=condition,
        wind=Wind(speed=round(kmh, 2), unit=SpeedUnit.kmh),
    )


def _normalize_mock(payload: RawWeatherPayload) -> WeatherReading:
    data = payload.data
    return _reading(
        payload.city,
        fahrenheit_to_celsius(float(data["temp_f"])),
        str(data["conditions"]),
        mph_to_kmh(float(data["wind_mph"])),
    )


def _normalize_openweather(payload: RawWeatherPayload) -> WeatherReading:
    data = payload.data
    description = data["weather"][0]["description"]
    return _reading(
        payload.city,
        kelvin_to_celsius(float(data["main"]["temp"])),
        description[:1].upper() + description[1:],
        ms_to_kmh(float(data["wind"]["speed"])),
    )


class Normalizer:
    """Maps each provider's payload onto ``WeatherReading`` in Celsius and km/h.

    Unit conversion happens here and nowhere else.
    """

    _rules: Dict[ProviderKind, Callable[[RawWeatherPayload], WeatherReading]] = {
        ProviderKind.mock: _normalize_mock,
        ProviderKind.openweather: _normalize_openweather,
    }

    def normalize(self, payload: RawWeatherPayload) -> WeatherReading:
        return self._rules[payload.provider](payload)
