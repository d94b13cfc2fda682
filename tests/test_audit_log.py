"""Unit tests for the append-only audit log."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from threading import Thread

import pytest
from pydantic import ValidationError

from app.schemas import (
    AuditOutcome,
    AuditRecord,
    TemperatureSchema,
    WeatherReadingResponse,
    WindSchema,
)
from datastore.audit_log import AuditLogTable
from models.records import SpeedUnit, TemperatureUnit

_BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _record(
    record_id: str = "rec-1",
    city: str = "Madrid",
    source: str = "mock",
    outcome: AuditOutcome = AuditOutcome.success,
    offset: int = 0,
) -> AuditRecord:
    reading = None
    error_kind = None
    if outcome == AuditOutcome.success:
        reading = WeatherReadingResponse(
            city=city,
            temperature=TemperatureSchema(value=21.5, unit=TemperatureUnit.C),
            condition="Clear",
            wind=WindSchema(speed=12.0, unit=SpeedUnit.kmh),
        )
    else:
        error_kind = "provider_failed:city_not_found"
    return AuditRecord(
        record_id=record_id,
        city=city,
        source=source,
        timestamp=_BASE_TIME + timedelta(seconds=offset),
        outcome=outcome,
        reading=reading,
        error_kind=error_kind,
    )


def test_append_and_get_round_trip() -> None:
    table = AuditLogTable(name="weather_audit")
    original = _record()

    table.append(original)
    fetched = table.get_item(original.record_id)

    assert fetched == original
    assert fetched is not original


def test_get_item_returns_none_when_missing() -> None:
    table = AuditLogTable(name="weather_audit")

    assert table.get_item("missing") is None


def test_records_are_write_once() -> None:
    table = AuditLogTable(name="weather_audit")
    table.append(_record())

    with pytest.raises(ValueError):
        table.append(_record(city="Paris"))

    assert table.get_item("rec-1").city == "Madrid"  # type: ignore[union-attr]


def test_records_are_frozen() -> None:
    record = _record()

    with pytest.raises(ValidationError):
        record.city = "Paris"  # type: ignore[misc]


def test_append_persists_json_lines_and_reloads(tmp_path) -> None:
    path = tmp_path / "audit.jsonl"
    table = AuditLogTable(name="weather_audit", persistence_path=path)

    table.append(_record("rec-1"))
    table.append(_record("rec-2", outcome=AuditOutcome.failure, offset=1))

    lines = path.read_text().splitlines()
    assert len(lines) == 2
    assert json.loads(lines[1])["error_kind"] == "provider_failed:city_not_found"

    reloaded = AuditLogTable(name="weather_audit", persistence_path=path)
    assert [record.record_id for record in reloaded.scan()] == ["rec-1", "rec-2"]
    assert reloaded.get_item("rec-1") == table.get_item("rec-1")


def test_corrupt_lines_are_skipped_on_load(tmp_path) -> None:
    path = tmp_path / "audit.jsonl"
    good = _record("rec-1").model_dump_json()
    path.write_text(f"{good}\nnot json\n{{\"record_id\": \"partial\"}}\n\n")

    table = AuditLogTable(name="weather_audit", persistence_path=path)

    assert [record.record_id for record in table.scan()] == ["rec-1"]


def test_query_filters_newest_first() -> None:
    table = AuditLogTable(name="weather_audit")
    table.append(_record("rec-1", city="Madrid", source="mock", offset=0))
    table.append(_record("rec-2", city="Paris", source="openweather", outcome=AuditOutcome.failure, offset=1))
    table.append(_record("rec-3", city="madrid", source="openweather", offset=2))
    table.append(_record("rec-4", city="Madrid", source="mock", offset=3))

    assert [r.record_id for r in table.query()] == ["rec-4", "rec-3", "rec-2", "rec-1"]
    assert [r.record_id for r in table.query(city="MADRID")] == ["rec-4", "rec-3", "rec-1"]
    assert [r.record_id for r in table.query(source="openweather")] == ["rec-3", "rec-2"]
    assert [r.record_id for r in table.query(outcome=AuditOutcome.failure)] == ["rec-2"]
    assert [r.record_id for r in table.query(city="Madrid", limit=2)] == ["rec-4", "rec-3"]


def test_concurrent_appends_keep_every_record(tmp_path) -> None:
    path = tmp_path / "audit.jsonl"
    table = AuditLogTable(name="weather_audit", persistence_path=path)

    def worker(prefix: str) -> None:
        for index in range(25):
            table.append(_record(f"{prefix}-{index}"))

    threads = [Thread(target=worker, args=(f"t{n}",)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(table.scan()) == 100
    lines = path.read_text().splitlines()
    assert len(lines) == 100
    assert all(json.loads(line)["record_id"] for line in lines)
