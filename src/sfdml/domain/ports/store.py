"""Ports for persisting CRM records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sfdml.domain.filters import RecordFilter
    from sfdml.domain.model import DmlOperation, Record, SObjectType


@runtime_checkable
class AccessChecker(Protocol):
    """Answers whether the current user may perform a DML operation.

    ``field`` narrows the question to a single field; ``None`` asks about the
    object as a whole.
    """

    def is_permitted(
        self,
        sobject_type: SObjectType,
        operation: DmlOperation,
        field: str | None = None,
    ) -> bool: ...


@runtime_checkable
class RecordStore(AccessChecker, Protocol):
    """Record store contract.

    Local stores commit each call atomically: a batch either commits entirely
    or raises ``BatchPersistenceError`` without side effects. Remote stores may
    split a large batch into atomic chunks; when a later chunk fails, the
    error lists the positions already committed in ``committed_indexes``.
    Fields left as ``None`` on a record are not written. Stores assign ids to
    inserted records in place and return the same record objects.
    """

    def query[TRecord: Record](
        self,
        record_type: type[TRecord],
        where: RecordFilter | None = None,
        *,
        limit: int | None = None,
    ) -> list[TRecord]: ...

    def insert[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]: ...

    def update[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]: ...

    def upsert[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]:
        """Update records with an id and insert the rest, in one call."""
        ...

    def delete(self, records: Sequence[Record]) -> None: ...
