"""Weather provider variants.

Every provider exposes a single ``fetch(city, config)`` returning a
``RawWeatherPayload`` in its native units, or raising ``ProviderError``.
Callers never depend on anything else.
"""

from __future__ import annotations

import logging
import math
import random
import zlib
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

import httpx

from models.records import ProviderConfig, ProviderKind, RawWeatherPayload
from services.errors import ProviderError, ProviderErrorKind
from settings import DEFAULT_OPENWEATHER_URL

logger = logging.getLogger(__name__)

MOCK_CONDITIONS = (
    "Clear",
    "Partly cloudy",
    "Cloudy",
    "Light rain",
    "Rain",
    "Thunderstorm",
    "Fog",
    "Snow",
)


def _require_city(city: str, kind: ProviderKind) -> str:
    candidate = (city or "").strip()
    if not candidate:
        raise ProviderError(
            ProviderErrorKind.invalid_input,
            f"Provider {kind.value!r} requires a non-empty city.",
        )
    return candidate


class WeatherProvider(ABC):
    kind: ProviderKind

    @abstractmethod
    def fetch(self, city: str, config: ProviderConfig) -> RawWeatherPayload:
        raise NotImplementedError

    def close(self) -> None:
        """Release provider resources. Stateless providers have nothing to do."""


class MockProvider(WeatherProvider):
    """Offline provider producing plausible imperial-unit readings.

    Output is deterministic per city so demos and tests are reproducible.
    """

    kind = ProviderKind.mock

    def fetch(self, city: str, config: ProviderConfig) -> RawWeatherPayload:
        name = _require_city(city, self.kind)
        rng = random.Random(zlib.crc32(name.lower().encode("utf-8", "surrogatepass")))
        data = {
            "location": name,
            "temp_f": round(rng.uniform(14.0, 104.0), 1),
            "conditions": rng.choice(MOCK_CONDITIONS),
            "wind_mph": round(rng.uniform(0.0, 40.0), 1),
        }
        return RawWeatherPayload(provider=self.kind, city=name, data=data)


class OpenWeatherProvider(WeatherProvider):
    """Integration with the OpenWeather current weather endpoint.

    Temperatures come back in Kelvin and wind speed in m/s (the API's
    ``standard`` units); the normalizer converts them.
    """

    kind = ProviderKind.openweather

    def __init__(
        self,
        base_url: str = DEFAULT_OPENWEATHER_URL,
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def fetch(self, city: str, config: ProviderConfig) -> RawWeatherPayload:
        name = _require_city(city, self.kind)
        api_key = config.get("apiKey")
        if not isinstance(api_key, str) or not api_key.strip():
            raise ProviderError(
                ProviderErrorKind.missing_credential,
                "OpenWeather requires an 'apiKey' in the provider configuration.",
            )

        params: Dict[str, str] = {"q": name, "appid": api_key.strip()}
        lang = config.get("lang")
        if isinstance(lang, str) and lang.strip():
            params["lang"] = lang.strip()

        try:
            response = self._client.get(self.base_url, params=params, timeout=self.timeout)
        except httpx.TimeoutException as exc:
            logger.warning("OpenWeather request timed out", extra={"city": name})
            raise ProviderError(
                ProviderErrorKind.upstream_unavailable,
                f"OpenWeather did not answer within {self.timeout:g}s.",
            ) from exc
        except httpx.RequestError as exc:
            logger.warning(
                "OpenWeather request failed: %s", type(exc).__name__, extra={"city": name}
            )
            raise ProviderError(
                ProviderErrorKind.upstream_unavailable,
                "OpenWeather could not be reached.",
            ) from exc

        self._check_status(response.status_code, name)

        try:
            body = response.json()
        except ValueError as exc:
            raise ProviderError(
                ProviderErrorKind.upstream_malformed_response,
                "OpenWeather returned a non-JSON body.",
                status_code=response.status_code,
            ) from exc

        if not isinstance(body, dict):
            raise ProviderError(
                ProviderErrorKind.upstream_malformed_response,
                "OpenWeather returned an unexpected payload.",
                status_code=response.status_code,
            )

        cod = body.get("cod")
        if cod is not None and str(cod) != "200":
            self._check_status(_status_from_cod(cod), name)

        self._validate_shape(body, response.status_code)
        return RawWeatherPayload(provider=self.kind, city=name, data=body)

    @staticmethod
    def _check_status(status_code: int, city: str) -> None:
        if 200 <= status_code < 300:
            return
        if status_code == 404:
            raise ProviderError(
                ProviderErrorKind.city_not_found,
                f"City {city!r} was not found by OpenWeather.",
                status_code=status_code,
            )
        logger.warning(
            "OpenWeather returned an error status",
            extra={"city": city, "status_code": status_code},
        )
        raise ProviderError(
            ProviderErrorKind.upstream_unavailable,
            f"OpenWeather responded with HTTP {status_code}.",
            status_code=status_code,
        )

    @staticmethod
    def _validate_shape(body: Mapping[str, Any], status_code: int) -> None:
        problems: list[str] = []

        main = body.get("main")
        if not isinstance(main, dict) or not _is_number(main.get("temp")):
            problems.append("main.temp")

        wind = body.get("wind")
        if not isinstance(wind, dict) or not _is_number(wind.get("speed")):
            problems.append("wind.speed")

        weather = body.get("weather")
        if (
            not isinstance(weather, list)
            or not weather
            or not isinstance(weather[0], dict)
            or not isinstance(weather[0].get("description"), str)
        ):
            problems.append("weather[0].description")

        if problems:
            raise ProviderError(
                ProviderErrorKind.upstream_malformed_response,
                f"OpenWeather payload is missing or mistyped: {', '.join(problems)}",
                status_code=status_code,
            )


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _status_from_cod(cod: Any) -> int:
    try:
        return int(cod)
    except (TypeError, ValueError):
        return 502
