from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_AUDIT_TABLE_NAME_ENV = "WEATHER_AUDIT_TABLE_NAME"
_AUDIT_PATH_ENV = "WEATHER_AUDIT_PERSISTENCE_PATH"
_OPENWEATHER_URL_ENV = "OPENWEATHER_BASE_URL"
_OPENWEATHER_TIMEOUT_ENV = "OPENWEATHER_TIMEOUT_SECONDS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


@dataclass(frozen=True)
class Settings:
    audit_table_name: str
    audit_persistence_path: Optional[str]
    openweather_base_url: str
    openweather_timeout: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_timeout(default: float) -> float:
    value = os.getenv(_OPENWEATHER_TIMEOUT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        audit_table_name=_read_str_env(_AUDIT_TABLE_NAME_ENV, "weather_audit"),
        audit_persistence_path=_read_optional_env(_AUDIT_PATH_ENV, "./tmp/weather_audit.jsonl"),
        openweather_base_url=_read_str_env(_OPENWEATHER_URL_ENV, DEFAULT_OPENWEATHER_URL),
        openweather_timeout=_read_timeout(5.0),
        log_level=_read_log_level("INFO"),
    )
