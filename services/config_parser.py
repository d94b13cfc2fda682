"""Parse the opaque provider configuration blob into a ``ProviderConfig``."""

from __future__ import annotations

import json
from typing import Optional

from models.records import ProviderConfig, ProviderKind
from services.errors import ConfigError, ConfigErrorKind

_PRIMITIVES = (str, int, float, bool, type(None))


def parse_provider_config(raw: Optional[str], kind: ProviderKind) -> ProviderConfig:
    """Parse ``raw`` as a JSON object of primitive values.

    Only syntax is checked here. Whether ``kind`` needs particular keys is
    decided by that provider's ``fetch``.
    """
    if raw is None or not raw.strip():
        return ProviderConfig()

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(
            ConfigErrorKind.malformed_syntax,
            f"Configuration for {kind.value!r} is not valid JSON (line {exc.lineno}, column {exc.colno}).",
        ) from exc

    if not isinstance(parsed, dict):
        raise ConfigError(
            ConfigErrorKind.not_an_object,
            f"Configuration for {kind.value!r} must be a JSON object, got {type(parsed).__name__}.",
        )

    nested = sorted(key for key, value in parsed.items() if not isinstance(value, _PRIMITIVES))
    if nested:
        raise ConfigError(
            ConfigErrorKind.unsupported_value,
            f"Configuration keys must hold primitive values: {', '.join(nested)}",
        )

    return ProviderConfig(parsed)
