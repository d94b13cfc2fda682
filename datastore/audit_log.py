from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional

from pydantic import ValidationError

from app.schemas import AuditOutcome, AuditRecord
from settings import get_settings

logger = logging.getLogger(__name__)


class AuditLogTable:
    """Append-only store of audit records.

    Each append holds the lock for the whole write, so concurrent requests
    never interleave. With a persistence path every record is written as one
    JSON line.
    """

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._items: Dict[str, AuditRecord] = {}
        self._order: List[str] = []
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def append(self, record: AuditRecord) -> None:
        with self._lock:
            if record.record_id in self._items:
                raise ValueError(f"Audit record {record.record_id!r} already exists.")
            if self.persistence_path:
                with self.persistence_path.open("a", encoding="utf-8") as handle:
                    handle.write(record.model_dump_json() + "\n")
            self._items[record.record_id] = record
            self._order.append(record.record_id)

    def get_item(self, record_id: str) -> Optional[AuditRecord]:
        with self._lock:
            item = self._items.get(record_id)
            if item is None:
                return None
            return item.model_copy(deep=True)

    def scan(self) -> list[AuditRecord]:
        """Return copies of all records in append order."""

        with self._lock:
            return [self._items[record_id].model_copy(deep=True) for record_id in self._order]

    def query(
        self,
        city: Optional[str] = None,
        source: Optional[str] = None,
        outcome: Optional[AuditOutcome] = None,
        limit: Optional[int] = None,
    ) -> list[AuditRecord]:
        """Return matching records, newest first. City and source match case-insensitively."""

        city_key = city.strip().lower() if city else None
        source_key = source.strip().lower() if source else None
        matches: list[AuditRecord] = []
        for record in reversed(self.scan()):
            if city_key and record.city.strip().lower() != city_key:
                continue
            if source_key and record.source.lower() != source_key:
                continue
            if outcome is not None and record.outcome != outcome:
                continue
            matches.append(record)
            if limit is not None and len(matches) >= limit:
                break
        return matches

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            lines = self.persistence_path.read_text(encoding="utf-8").splitlines()
        except OSError:
            lines = []

        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                record = AuditRecord.model_validate(json.loads(line))
            except (json.JSONDecodeError, ValidationError):
                logger.warning(
                    "Skipping unreadable audit line %d in %s", line_number, self.persistence_path
                )
                continue
            if record.record_id in self._items:
                continue
            self._items[record.record_id] = record
            self._order.append(record.record_id)


@lru_cache
def build_default_audit_log(
    name: Optional[str] = None,
    path: Optional[str] = None,
) -> AuditLogTable:
    settings = get_settings()
    table_name = settings.audit_table_name if name is None else name
    table_path = settings.audit_persistence_path if path is None else path
    persistence = Path(table_path) if table_path else None
    return AuditLogTable(name=table_name, persistence_path=persistence)
