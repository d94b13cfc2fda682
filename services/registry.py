"""Source-name to provider resolution."""

from __future__ import annotations

from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from models.records import ProviderKind
from services.errors import ResolutionError
from services.providers import MockProvider, OpenWeatherProvider, WeatherProvider
from settings import get_settings

DEFAULT_SOURCE = ProviderKind.mock.value


class ProviderRegistry:
    """Immutable mapping of source names to provider instances.

    Names are matched case-insensitively. A missing or blank name resolves to
    ``mock``; anything else that is not registered is rejected.
    """

    def __init__(self, providers: Iterable[WeatherProvider], default: str = DEFAULT_SOURCE) -> None:
        table: dict[str, WeatherProvider] = {}
        for provider in providers:
            name = provider.kind.value
            if name in table:
                raise ValueError(f"Provider {name!r} registered twice.")
            table[name] = provider
        if default not in table:
            raise ValueError(f"Default provider {default!r} is not registered.")
        self._providers: Mapping[str, WeatherProvider] = MappingProxyType(table)
        self.default = default

    def resolve(self, source: Optional[str]) -> WeatherProvider:
        name = (source or "").strip().lower() or self.default
        provider = self._providers.get(name)
        if provider is None:
            raise ResolutionError(source or "")
        return provider

    def names(self) -> list[str]:
        return sorted(self._providers)

    def providers(self) -> list[WeatherProvider]:
        return list(self._providers.values())

    def close(self) -> None:
        for provider in self._providers.values():
            provider.close()


@lru_cache
def build_default_registry() -> ProviderRegistry:
    settings = get_settings()
    return ProviderRegistry(
        [
            MockProvider(),
            OpenWeatherProvider(
                base_url=settings.openweather_base_url,
                timeout=settings.openweather_timeout,
            ),
        ]
    )
