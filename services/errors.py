"""Error taxonomy for the weather pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ConfigErrorKind(str, Enum):
    malformed_syntax = "malformed_syntax"
    not_an_object = "not_an_object"
    unsupported_value = "unsupported_value"


class ProviderErrorKind(str, Enum):
    missing_credential = "missing_credential"
    city_not_found = "city_not_found"
    upstream_unavailable = "upstream_unavailable"
    upstream_malformed_response = "upstream_malformed_response"
    invalid_input = "invalid_input"


class WeatherErrorKind(str, Enum):
    invalid_city = "invalid_city"
    unknown_source = "unknown_source"
    invalid_config = "invalid_config"
    provider_failed = "provider_failed"


class GatewayError(Exception):
    """Base class for every error raised by the weather pipeline."""


class ConfigError(GatewayError):
    """Raised when a provider configuration blob cannot be parsed."""

    def __init__(self, kind: ConfigErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class ResolutionError(GatewayError):
    """Raised when a source name does not match any registered provider."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown weather source {name!r}.")
        self.name = name


class ProviderError(GatewayError):
    """Raised by a provider's ``fetch``.

    ``status_code`` keeps the upstream HTTP status, when there was one, for
    diagnostics. ``message`` must never contain credentials.
    """

    def __init__(
        self,
        kind: ProviderErrorKind,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code


class WeatherError(GatewayError):
    """The only error type that leaves ``WeatherService``."""

    def __init__(
        self,
        kind: WeatherErrorKind,
        message: str,
        provider_error: Optional[ProviderErrorKind] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.provider_error = provider_error

    @property
    def label(self) -> str:
        """Error kind as recorded in the audit log, e.g. ``provider_failed:city_not_found``."""
        if self.provider_error is None:
            return self.kind.value
        return f"{self.kind.value}:{self.provider_error.value}"
