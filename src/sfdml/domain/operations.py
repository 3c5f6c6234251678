"""Single-record and single-batch DML wrappers.

Each wrapper follows the same shape: authorize, optionally fetch by id,
mutate, then one store call. Denied mutations are skipped according to the
authorization policy and reported through the return value.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from sfdml.domain.errors import RecordNotFoundError
from sfdml.domain.filters import RecordFilter
from sfdml.domain.model import DmlOperation, UnknownFieldError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sfdml.domain.authorization import AuthorizationPolicy
    from sfdml.domain.model import Record, RecordId, SObjectType
    from sfdml.domain.ports import RecordStore

log = getLogger(__name__)


def _group_by_type(records: Sequence[Record]) -> dict[SObjectType, list[Record]]:
    groups: dict[SObjectType, list[Record]] = {}
    for record in records:
        groups.setdefault(record.sobject_type, []).append(record)
    return groups


def _written_fields(records: Sequence[Record]) -> tuple[str, ...]:
    names: dict[str, None] = {}
    for record in records:
        names.update(dict.fromkeys(record.to_fields(include_id=False)))
    return tuple(names)


@dataclass(slots=True)
class RecordOperations:
    store: RecordStore
    authorization: AuthorizationPolicy

    def get_record[TRecord: Record](
        self,
        record_type: type[TRecord],
        record_id: RecordId,
    ) -> TRecord:
        """Fetch one record by id or raise ``RecordNotFoundError``."""

        found = self.store.query(record_type, RecordFilter.equals("Id", record_id), limit=1)
        if not found:
            raise RecordNotFoundError(record_type.SOBJECT_TYPE, record_id)
        return found[0]

    def authorized(self, records: Sequence[Record], operation: DmlOperation) -> bool:
        """Authorize ``operation`` for every object type in ``records``."""

        for sobject_type, group in _group_by_type(records).items():
            fields = () if operation is DmlOperation.DELETE else _written_fields(group)
            if not self.authorization.authorize(sobject_type, operation, fields).allowed:
                return False
        return True

    def create_record(
        self,
        record_type: type[Record],
        fields: Mapping[str, object],
    ) -> RecordId | None:
        """Insert one record built from API-name keyed ``fields``; ``None`` when denied."""

        record = record_type.from_fields(fields)
        if record.id is not None:
            raise ValueError("New records must not carry an Id")
        return self.insert_record(record)

    def insert_record(self, record: Record) -> RecordId | None:
        if not self.authorized([record], DmlOperation.CREATE):
            return None
        self.store.insert([record])
        log.info("Created %s %s", record.sobject_type, record.id)
        return record.id

    def update_field(
        self,
        record_type: type[Record],
        record_id: RecordId,
        field: str,
        value: object,
    ) -> bool:
        """Set one field on an existing record; returns whether it was written."""

        return self.update_fields(record_type, record_id, {field: value})

    def update_fields(
        self,
        record_type: type[Record],
        record_id: RecordId,
        values: Mapping[str, object],
    ) -> bool:
        if not values:
            raise ValueError("Nothing to update")
        for api_name, value in values.items():
            if api_name == "Id":
                raise ValueError("The Id field cannot be updated")
            if value is None:
                raise ValueError(f"Cannot clear {api_name}: None means 'unchanged' for updates")
            if not record_type.has_field(api_name):
                raise UnknownFieldError(record_type.SOBJECT_TYPE, api_name)

        decision = self.authorization.authorize(
            record_type.SOBJECT_TYPE,
            DmlOperation.UPDATE,
            tuple(values),
        )
        if not decision.allowed:
            return False

        record = self.get_record(record_type, record_id)
        for api_name, value in values.items():
            record.set_field(api_name, value)
        self.store.update([record])
        log.info("Updated %s %s: %s", record.sobject_type, record_id, ", ".join(values))
        return True

    def upsert_all[TRecord: Record](self, records: Sequence[TRecord]) -> bool:
        """Upsert records by id in one call; returns whether the batch was committed."""

        if not records:
            return False
        needed: list[tuple[DmlOperation, list[TRecord]]] = []
        new_records = [record for record in records if record.id is None]
        existing = [record for record in records if record.id is not None]
        if new_records:
            needed.append((DmlOperation.CREATE, new_records))
        if existing:
            needed.append((DmlOperation.UPDATE, existing))
        for operation, batch in needed:
            if not self.authorized(batch, operation):
                return False
        self.store.upsert(records)
        log.info("Upserted %s record(s): created=%s", len(records), len(new_records))
        return True

    def insert_all[TRecord: Record](self, records: Sequence[TRecord]) -> bool:
        if not records:
            return False
        if not self.authorized(records, DmlOperation.CREATE):
            return False
        self.store.insert(records)
        log.info("Inserted %s record(s)", len(records))
        return True

    def delete_all(self, records: Sequence[Record]) -> bool:
        """Delete committed records in one call; returns whether anything was deleted."""

        if not records:
            return False
        uncommitted = [index for index, record in enumerate(records) if record.id is None]
        if uncommitted:
            raise ValueError(f"Cannot delete records without an Id (positions {uncommitted})")
        if not self.authorized(records, DmlOperation.DELETE):
            return False
        self.store.delete(records)
        log.info("Deleted %s record(s)", len(records))
        return True

    def insert_then_delete_all(self, records: Sequence[Record]) -> bool:
        """Insert records, then delete them; used for transient test data.

        Returns whether the records were both inserted and deleted.
        """

        if not self.insert_all(records):
            return False
        return self.delete_all(records)
