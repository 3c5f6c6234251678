"""Record store backed by a Salesforce org.

Writes go through sObject Collections with ``allOrNone``, so each request is
atomic. Batches above the collection limit are sent in consecutive chunks; a
failing chunk does not undo the chunks before it, and the raised
``BatchPersistenceError`` lists their positions in ``committed_indexes``.
Upserts that mix new and existing records use the composite endpoint with
per-record subrequests, chunked the same way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import TypeAdapter

from sfdml.domain.errors import BatchPersistenceError, RecordFailure
from sfdml.domain.model import DmlOperation

from .client import COLLECTION_LIMIT, COMPOSITE_LIMIT
from .schema import ApiError, SaveResult
from .soql import build_select
from .translator import from_payload, to_payload

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sfdml.domain.filters import RecordFilter
    from sfdml.domain.model import Record, SObjectType
    from sfdml.domain.ports import RecordStore

    from .client import SalesforceClient
    from .schema import CompositeSubresponse, DescribeResult

log = getLogger(__name__)

# Reported for records that were valid but rolled back with a failing sibling.
_ROLLBACK_CODES: Final = frozenset({"ALL_OR_NONE_OPERATION_ROLLED_BACK", "PROCESSING_HALTED"})
_ERRORS = TypeAdapter(list[ApiError])


def _chunks[T](items: Sequence[T], size: int) -> list[tuple[int, Sequence[T]]]:
    return [(start, items[start : start + size]) for start in range(0, len(items), size)]


def _failures_from_errors(
    index: int,
    errors: Sequence[ApiError],
    record_id: str | None,
) -> list[RecordFailure]:
    return [
        RecordFailure(
            index=index,
            status_code=error.status_code,
            message=error.message,
            fields=tuple(error.fields),
            record_id=record_id,
        )
        for error in errors
    ]


def _without_rollbacks(failures: list[RecordFailure]) -> list[RecordFailure]:
    causes = [failure for failure in failures if failure.status_code not in _ROLLBACK_CODES]
    return causes or failures


@dataclass(slots=True)
class SalesforceRecordStore:
    client: SalesforceClient
    _describes: dict[SObjectType, DescribeResult] = field(default_factory=dict)

    def describe(self, sobject_type: SObjectType) -> DescribeResult:
        """Return object metadata, fetched once per store instance."""

        if sobject_type not in self._describes:
            self._describes[sobject_type] = self.client.describe(sobject_type)
        return self._describes[sobject_type]

    def is_permitted(
        self,
        sobject_type: SObjectType,
        operation: DmlOperation,
        field: str | None = None,
    ) -> bool:
        describe = self.describe(sobject_type)
        if operation is DmlOperation.DELETE:
            return describe.deletable
        allowed = describe.createable if operation is DmlOperation.CREATE else describe.updateable
        if field is None or not allowed:
            return allowed
        field_describe = describe.field(field)
        if field_describe is None:
            return False
        if operation is DmlOperation.CREATE:
            return field_describe.createable
        return field_describe.updateable

    def query[TRecord: Record](
        self,
        record_type: type[TRecord],
        where: RecordFilter | None = None,
        *,
        limit: int | None = None,
    ) -> list[TRecord]:
        rows = self.client.query(build_select(record_type, where, limit=limit))
        return [from_payload(record_type, row) for row in rows]

    def insert[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]:
        for record in records:
            if record.id is not None:
                raise ValueError(f"Cannot insert a record that already has an id: {record.id}")
        for start, chunk in _chunks(records, COLLECTION_LIMIT):
            results = self.client.create_records(
                [to_payload(record, include_id=False) for record in chunk]
            )
            self._apply_save_results("insert", start, chunk, results, batch_size=len(records))
        return list(records)

    def update[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]:
        for index, record in enumerate(records):
            if record.id is None:
                raise ValueError(f"Cannot update a record without an id (position {index})")
        for start, chunk in _chunks(records, COLLECTION_LIMIT):
            results = self.client.update_records(
                [to_payload(record, include_id=True) for record in chunk]
            )
            self._apply_save_results("update", start, chunk, results, batch_size=len(records))
        return list(records)

    def upsert[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]:
        if all(record.id is None for record in records):
            return self.insert(records)
        if all(record.id is not None for record in records):
            return self.update(records)

        for start, chunk in _chunks(records, COMPOSITE_LIMIT):
            subrequests: list[dict[str, object]] = []
            for offset, record in enumerate(chunk):
                if record.id is None:
                    subrequests.append(
                        {
                            "method": "POST",
                            "url": self.client.sobject_url(record.sobject_type),
                            "referenceId": f"r{offset}",
                            "body": to_payload(record, include_id=False),
                        }
                    )
                else:
                    body = to_payload(record, include_id=False)
                    body.pop("attributes")
                    subrequests.append(
                        {
                            "method": "PATCH",
                            "url": self.client.sobject_url(record.sobject_type, record.id),
                            "referenceId": f"r{offset}",
                            "body": body,
                        }
                    )
            response = self.client.composite(subrequests, all_or_none=True)
            self._apply_composite(start, chunk, response.composite_response, len(records))
        return list(records)

    def delete(self, records: Sequence[Record]) -> None:
        record_ids: list[str] = []
        for index, record in enumerate(records):
            if record.id is None:
                raise ValueError(f"Cannot delete a record without an id (position {index})")
            record_ids.append(record.id)
        for start, chunk in _chunks(record_ids, COLLECTION_LIMIT):
            results = self.client.delete_records(chunk)
            failures = [
                failure
                for offset, result in enumerate(results)
                if not result.success
                for failure in _failures_from_errors(start + offset, result.errors, result.id)
            ]
            if failures:
                raise BatchPersistenceError(
                    "delete",
                    tuple(_without_rollbacks(failures)),
                    batch_size=len(records),
                    committed_indexes=tuple(range(start)),
                )
        log.debug("Deleted %s record(s)", len(records))

    @staticmethod
    def _apply_save_results(
        operation: str,
        start: int,
        chunk: Sequence[Record],
        results: Sequence[SaveResult],
        *,
        batch_size: int,
    ) -> None:
        failures: list[RecordFailure] = []
        for offset, (record, result) in enumerate(zip(chunk, results, strict=True)):
            if not result.success:
                failures.extend(
                    _failures_from_errors(start + offset, result.errors, record.id)
                )
        if failures:
            raise BatchPersistenceError(
                operation,
                tuple(_without_rollbacks(failures)),
                batch_size=batch_size,
                committed_indexes=tuple(range(start)),
            )
        for record, result in zip(chunk, results, strict=True):
            if record.id is None:
                record.id = result.id

    @staticmethod
    def _apply_composite(
        start: int,
        chunk: Sequence[Record],
        subresponses: Sequence[CompositeSubresponse],
        batch_size: int,
    ) -> None:
        by_reference = {subresponse.reference_id: subresponse for subresponse in subresponses}
        failures: list[RecordFailure] = []
        created: list[tuple[Record, str | None]] = []
        for offset, record in enumerate(chunk):
            subresponse = by_reference[f"r{offset}"]
            if subresponse.ok:
                if record.id is None:
                    created.append((record, SaveResult.model_validate(subresponse.body).id))
                continue
            body = subresponse.body if isinstance(subresponse.body, list) else []
            errors = _ERRORS.validate_python(body) or [
                ApiError(status_code=str(subresponse.http_status_code), message="request failed")
            ]
            failures.extend(_failures_from_errors(start + offset, errors, record.id))
        if failures:
            raise BatchPersistenceError(
                "upsert",
                tuple(_without_rollbacks(failures)),
                batch_size=batch_size,
                committed_indexes=tuple(range(start)),
            )
        for record, record_id in created:
            record.id = record_id


if TYPE_CHECKING:

    def _store_check(client: SalesforceClient) -> RecordStore:
        return SalesforceRecordStore(client)
