"""Batch validation shared by the local record stores.

Local stores reproduce the platform's all-or-nothing rules: every record in a
batch is checked before anything is written, and all failures are reported
together.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from sfdml.domain.errors import BatchPersistenceError, RecordFailure

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sfdml.domain.model import Record, RecordId, SObjectType

type Exists = Callable[[SObjectType, RecordId], bool]
type BatchOperation = Literal["insert", "update", "upsert", "delete"]


def _reference_failures(index: int, record: Record, exists: Exists) -> list[RecordFailure]:
    failures: list[RecordFailure] = []
    for api_name, target in record.reference_fields().items():
        value = record.get_field(api_name)
        if value is None:
            continue
        if not isinstance(value, str) or not exists(target, value):
            failures.append(
                RecordFailure(
                    index=index,
                    status_code="INVALID_CROSS_REFERENCE_KEY",
                    message=f"invalid cross reference id: {value}",
                    fields=(api_name,),
                    record_id=record.id,
                )
            )
    return failures


def collect_failures(
    operation: BatchOperation,
    records: Sequence[Record],
    *,
    exists: Exists,
) -> list[RecordFailure]:
    failures: list[RecordFailure] = []
    seen_ids: set[str] = set()
    for index, record in enumerate(records):
        if record.id is not None:
            if record.id in seen_ids:
                failures.append(
                    RecordFailure(
                        index=index,
                        status_code="DUPLICATE_VALUE",
                        message=f"duplicate id in batch: {record.id}",
                        record_id=record.id,
                    )
                )
                continue
            seen_ids.add(record.id)

        is_new = record.id is None
        if operation == "insert" and not is_new:
            raise ValueError(f"Cannot insert a record that already has an id: {record.id}")
        if operation in {"update", "delete"} and is_new:
            raise ValueError(f"Cannot {operation} a record without an id (position {index})")

        if not is_new and not exists(record.sobject_type, record.id):  # type: ignore[arg-type]
            failures.append(
                RecordFailure(
                    index=index,
                    status_code="ENTITY_IS_DELETED",
                    message="entity is deleted",
                    record_id=record.id,
                )
            )
            continue
        if operation == "delete":
            continue

        missing = record.missing_required_fields() if is_new else ()
        if missing:
            failures.append(
                RecordFailure(
                    index=index,
                    status_code="REQUIRED_FIELD_MISSING",
                    message=f"Required fields are missing: [{', '.join(missing)}]",
                    fields=missing,
                )
            )
        failures.extend(_reference_failures(index, record, exists))
    return failures


def validate_batch(
    operation: BatchOperation,
    records: Sequence[Record],
    *,
    exists: Exists,
) -> None:
    """Raise ``BatchPersistenceError`` if any record in ``records`` would be rejected."""

    failures = collect_failures(operation, records, exists=exists)
    if failures:
        raise BatchPersistenceError(operation, tuple(failures), batch_size=len(records))
