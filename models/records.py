"""Domain values shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Union


ConfigValue = Union[str, int, float, bool, None]


class ProviderKind(str, Enum):
    """Closed set of provider variants known to the gateway."""

    mock = "mock"
    openweather = "openweather"


class TemperatureUnit(str, Enum):
    C = "C"
    F = "F"


class SpeedUnit(str, Enum):
    kmh = "kmh"
    mph = "mph"


@dataclass(frozen=True, slots=True)
class Temperature:
    value: float
    unit: TemperatureUnit


@dataclass(frozen=True, slots=True)
class Wind:
    speed: float
    unit: SpeedUnit


@dataclass(frozen=True, slots=True)
class WeatherReading:
    """Canonical reading; units are always Celsius and km/h once normalized."""

    city: str
    temperature: Temperature
    condition: str
    wind: Wind


@dataclass(frozen=True)
class ProviderConfig:
    """Provider settings parsed from the request's configuration blob."""

    values: Mapping[str, ConfigValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get(self, key: str, default: ConfigValue = None) -> ConfigValue:
        return self.values.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class RawWeatherPayload:
    """Provider-native body, already shape-checked by the provider that produced it."""

    provider: ProviderKind
    city: str
    data: Mapping[str, Any]
