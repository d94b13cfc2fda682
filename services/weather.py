"""Weather request orchestration: resolve, configure, fetch, normalize, audit."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional
from uuid import uuid4

from app.schemas import AuditOutcome, AuditRecord, WeatherReadingResponse
from datastore.audit_log import AuditLogTable, build_default_audit_log
from models.records import WeatherReading
from services.config_parser import parse_provider_config
from services.errors import (
    ConfigError,
    ProviderError,
    ResolutionError,
    WeatherError,
    WeatherErrorKind,
)
from services.normalizer import Normalizer
from services.registry import ProviderRegistry, build_default_registry

logger = logging.getLogger(__name__)


class WeatherService:
    """Runs one request through the provider pipeline and records the outcome."""

    def __init__(
        self,
        registry: ProviderRegistry,
        normalizer: Normalizer,
        audit_log: AuditLogTable,
    ) -> None:
        self.registry = registry
        self.normalizer = normalizer
        self.audit_log = audit_log

    def get_weather(
        self,
        city: Optional[str],
        source: Optional[str] = None,
        raw_config: Optional[str] = None,
    ) -> WeatherReading:
        """Return the canonical reading for ``city`` or raise ``WeatherError``.

        An audit record is appended for every request that completes, whether
        it succeeded or failed.
        """
        start_time = time.perf_counter()
        city_name = (city or "").strip()
        source_name = (source or "").strip().lower() or self.registry.default

        try:
            reading = self._run(city_name, source_name, raw_config)
        except WeatherError as exc:
            self._record(city_name, source_name, error=exc)
            logger.info(
                "Weather request failed: %s",
                exc.message,
                extra={
                    "city": city_name,
                    "source": source_name,
                    "outcome": AuditOutcome.failure.value,
                    "error_kind": exc.label,
                    "elapsed_ms": _elapsed_ms(start_time),
                },
            )
            raise

        self._record(city_name, source_name, reading=reading)
        logger.info(
            "Weather request served",
            extra={
                "city": city_name,
                "source": source_name,
                "outcome": AuditOutcome.success.value,
                "elapsed_ms": _elapsed_ms(start_time),
            },
        )
        return reading

    def close(self) -> None:
        self.registry.close()

    def _run(self, city: str, source: str, raw_config: Optional[str]) -> WeatherReading:
        if not city:
            raise WeatherError(WeatherErrorKind.invalid_city, "City must not be blank.")

        try:
            provider = self.registry.resolve(source)
        except ResolutionError as exc:
            raise WeatherError(
                WeatherErrorKind.unknown_source,
                f"Unknown weather source {exc.name!r}. Known sources: {', '.join(self.registry.names())}.",
            ) from exc

        try:
            config = parse_provider_config(raw_config, provider.kind)
        except ConfigError as exc:
            raise WeatherError(WeatherErrorKind.invalid_config, exc.message) from exc

        try:
            payload = provider.fetch(city, config)
        except ProviderError as exc:
            raise WeatherError(
                WeatherErrorKind.provider_failed,
                exc.message,
                provider_error=exc.kind,
            ) from exc

        return self.normalizer.normalize(payload)

    def _record(
        self,
        city: str,
        source: str,
        reading: Optional[WeatherReading] = None,
        error: Optional[WeatherError] = None,
    ) -> None:
        record = AuditRecord(
            record_id=str(uuid4()),
            city=city,
            source=source,
            timestamp=datetime.now(timezone.utc),
            outcome=AuditOutcome.failure if error is not None else AuditOutcome.success,
            reading=WeatherReadingResponse.from_reading(reading) if reading is not None else None,
            error_kind=error.label if error is not None else None,
            provider_error=(
                error.provider_error.value
                if error is not None and error.provider_error is not None
                else None
            ),
        )
        try:
            self.audit_log.append(record)
        except Exception as exc:  # noqa: BLE001 - audit is best effort
            logger.warning(
                "Failed to append audit record: %s",
                exc,
                extra={"record_id": record.record_id, "city": city, "source": source},
            )


def _elapsed_ms(start_time: float) -> int:
    return int((time.perf_counter() - start_time) * 1000)


@lru_cache
def build_default_service() -> WeatherService:
    """Factory that wires the service with the default registry and audit log."""
    return WeatherService(
        registry=build_default_registry(),
        normalizer=Normalizer(),
        audit_log=build_default_audit_log(),
    )
