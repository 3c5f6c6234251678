"""Reusable fakes and helpers for record store tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from sfdml.domain.authorization import AuthorizationPolicy, DeniedAction
from sfdml.domain.exercises import DmlExercises

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sfdml.adapters.memory import InMemoryRecordStore
    from sfdml.domain.filters import RecordFilter
    from sfdml.domain.model import DmlOperation, Record, SObjectType
    from sfdml.domain.ports import RecordStore


@dataclass(slots=True)
class StoreCall:
    method: str
    sobject_type: SObjectType
    count: int
    where: RecordFilter | None = None


@dataclass(slots=True)
class RecordingStore:
    """Delegate to an in-memory store and record every call made to it."""

    inner: InMemoryRecordStore
    calls: list[StoreCall] = field(default_factory=list)

    def methods(self) -> list[str]:
        return [call.method for call in self.calls]

    def writes(self) -> list[StoreCall]:
        return [call for call in self.calls if call.method != "query"]

    def is_permitted(
        self,
        sobject_type: SObjectType,
        operation: DmlOperation,
        field: str | None = None,
    ) -> bool:
        return self.inner.is_permitted(sobject_type, operation, field)

    def query[TRecord: Record](
        self,
        record_type: type[TRecord],
        where: RecordFilter | None = None,
        *,
        limit: int | None = None,
    ) -> list[TRecord]:
        found = self.inner.query(record_type, where, limit=limit)
        self.calls.append(StoreCall("query", record_type.SOBJECT_TYPE, len(found), where))
        return found

    def insert[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]:
        self._record("insert", records)
        return self.inner.insert(records)

    def update[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]:
        self._record("update", records)
        return self.inner.update(records)

    def upsert[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]:
        self._record("upsert", records)
        return self.inner.upsert(records)

    def delete(self, records: Sequence[Record]) -> None:
        self._record("delete", records)
        self.inner.delete(records)

    def _record(self, method: str, records: Sequence[Record]) -> None:
        sobject_type = records[0].sobject_type if records else None
        self.calls.append(StoreCall(method, sobject_type, len(records)))  # type: ignore[arg-type]


def make_exercises(
    store: RecordStore,
    *,
    on_denied: DeniedAction = DeniedAction.SKIP,
    today: date = date(2024, 1, 31),
) -> DmlExercises:
    return DmlExercises(store, AuthorizationPolicy(store, on_denied), today=lambda: today)

