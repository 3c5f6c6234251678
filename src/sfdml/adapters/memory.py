"""In-process record store.

Keeps field snapshots per object type, so callers never share mutable state
with the store: queries return fresh record objects, and writes copy values in.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from sfdml.domain.authorization import StaticPermissions
from sfdml.domain.model import SObjectType, make_record_id

from .validation import validate_batch

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from sfdml.domain.filters import RecordFilter
    from sfdml.domain.model import DmlOperation, Record, RecordId
    from sfdml.domain.ports import RecordStore

log = getLogger(__name__)

type Snapshot = dict[str, object]


@dataclass(slots=True)
class InMemoryRecordStore:
    permissions: StaticPermissions = field(default_factory=StaticPermissions)
    _tables: dict[SObjectType, dict[RecordId, Snapshot]] = field(
        default_factory=lambda: {sobject_type: {} for sobject_type in SObjectType}
    )
    _sequence: Iterator[int] = field(default_factory=lambda: itertools.count(1))

    def is_permitted(
        self,
        sobject_type: SObjectType,
        operation: DmlOperation,
        field: str | None = None,
    ) -> bool:
        return self.permissions.is_permitted(sobject_type, operation, field)

    def exists(self, sobject_type: SObjectType, record_id: RecordId) -> bool:
        return record_id in self._tables[sobject_type]

    def count(self, sobject_type: SObjectType) -> int:
        return len(self._tables[sobject_type])

    def query[TRecord: Record](
        self,
        record_type: type[TRecord],
        where: RecordFilter | None = None,
        *,
        limit: int | None = None,
    ) -> list[TRecord]:
        results: list[TRecord] = []
        for snapshot in self._tables[record_type.SOBJECT_TYPE].values():
            record = record_type.from_fields(snapshot)
            if where is not None and not where.matches(record):
                continue
            results.append(record)
            if limit is not None and len(results) >= limit:
                break
        return results

    def insert[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]:
        if not records:
            return list(records)
        validate_batch("insert", records, exists=self.exists)
        for record in records:
            self._write_new(record)
        return list(records)

    def update[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]:
        if not records:
            return list(records)
        validate_batch("update", records, exists=self.exists)
        for record in records:
            self._write_existing(record)
        return list(records)

    def upsert[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]:
        if not records:
            return list(records)
        validate_batch("upsert", records, exists=self.exists)
        for record in records:
            if record.id is None:
                self._write_new(record)
            else:
                self._write_existing(record)
        return list(records)

    def delete(self, records: Sequence[Record]) -> None:
        if not records:
            return
        validate_batch("delete", records, exists=self.exists)
        for record in records:
            del self._tables[record.sobject_type][record.id]  # type: ignore[arg-type]

    def _write_new(self, record: Record) -> None:
        record_id = make_record_id(record.sobject_type, next(self._sequence))
        record.id = record_id
        self._tables[record.sobject_type][record_id] = record.to_fields()
        log.debug("Inserted %s %s", record.sobject_type, record_id)

    def _write_existing(self, record: Record) -> None:
        snapshot = self._tables[record.sobject_type][record.id]  # type: ignore[index]
        snapshot.update(record.to_fields())


if TYPE_CHECKING:
    _store_check: RecordStore = InMemoryRecordStore()
