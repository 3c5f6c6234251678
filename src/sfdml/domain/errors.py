"""Failures surfaced by DML operations.

No operation retries; every error here reaches the caller unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sfdml.domain.model import DmlOperation, RecordId, SObjectType


class DmlError(RuntimeError):
    """Base class for DML failures."""


class AuthorizationDenied(DmlError):
    """Raised when a mutation lacks permission and the policy says to raise."""

    def __init__(
        self,
        sobject_type: SObjectType,
        operation: DmlOperation,
        field: str | None = None,
    ) -> None:
        target = f"{sobject_type}.{field}" if field else str(sobject_type)
        super().__init__(f"Not permitted to {operation} {target}")
        self.sobject_type = sobject_type
        self.operation = operation
        self.field = field


class RecordNotFoundError(DmlError):
    """Raised when a record expected to exist is not returned by the store."""

    def __init__(self, sobject_type: SObjectType, record_id: RecordId) -> None:
        super().__init__(f"{sobject_type} {record_id} not found")
        self.sobject_type = sobject_type
        self.record_id = record_id


@dataclass(frozen=True, slots=True)
class RecordFailure:
    """One rejected record inside a batch.

    ``index`` is the record's position in the batch passed to the store.
    """

    index: int
    status_code: str
    message: str
    fields: tuple[str, ...] = ()
    record_id: RecordId | None = None

    def __str__(self) -> str:
        where = f" [{', '.join(self.fields)}]" if self.fields else ""
        return f"#{self.index} {self.status_code}: {self.message}{where}"


class BatchPersistenceError(DmlError):
    """Raised when the store rejects a batch.

    Local stores commit nothing from a rejected batch. Stores that split large
    batches into atomic chunks may already have committed earlier chunks; those
    positions are listed in ``committed_indexes`` and keep their ids.
    """

    def __init__(
        self,
        operation: str,
        failures: tuple[RecordFailure, ...],
        *,
        batch_size: int,
        committed_indexes: tuple[int, ...] = (),
    ) -> None:
        if not failures:
            raise ValueError("Batch persistence errors must carry at least one failure")
        summary = "; ".join(str(failure) for failure in failures[:5])
        more = f" (+{len(failures) - 5} more)" if len(failures) > 5 else ""
        committed = (
            f"; {len(committed_indexes)} already committed" if committed_indexes else ""
        )
        super().__init__(
            f"{operation} of {batch_size} record(s) rejected: {summary}{more}{committed}"
        )
        self.operation = operation
        self.failures = failures
        self.batch_size = batch_size
        self.committed_indexes = committed_indexes

    @property
    def failed_indexes(self) -> tuple[int, ...]:
        return tuple(failure.index for failure in self.failures)
