"""Record store backed by SQLAlchemy Core tables."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import ColumnElement, delete, func, insert, select, update

from sfdml.domain.authorization import StaticPermissions
from sfdml.domain.filters import Equals, In
from sfdml.domain.model import random_record_id

from ..validation import validate_batch
from .engine import configured_engine
from .mappings import TABLE_BY_TYPE

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Column, Connection, Table
    from sqlalchemy.engine import Engine

    from sfdml.domain.filters import Condition, RecordFilter
    from sfdml.domain.model import DmlOperation, Record, RecordId, SObjectType
    from sfdml.domain.ports import RecordStore

    from ..validation import BatchOperation, Exists

log = getLogger(__name__)


def _lowered(value: object) -> object:
    return value.lower() if isinstance(value, str) else value


def _condition_clause(table: Table, condition: Condition) -> ColumnElement[bool]:
    column: Column[object] = table.c[condition.field]
    match condition:
        case Equals(value=value) if isinstance(value, str):
            return func.lower(column) == value.lower()
        case Equals(value=value):
            return column == value
        case In(values=values):
            text_values = [_lowered(value) for value in values if isinstance(value, str)]
            other_values = [value for value in values if not isinstance(value, str)]
            if other_values and text_values:
                return func.lower(column).in_(text_values) | column.in_(other_values)
            if text_values:
                return func.lower(column).in_(text_values)
            return column.in_(other_values)
    raise TypeError(f"Unsupported condition: {condition!r}")


def _group_by_type(records: Sequence[Record]) -> dict[SObjectType, list[Record]]:
    groups: dict[SObjectType, list[Record]] = {}
    for record in records:
        groups.setdefault(record.sobject_type, []).append(record)
    return groups


class SqlAlchemyRecordStore:
    """Each public call runs in its own transaction."""

    def __init__(
        self,
        engine: Engine | None = None,
        *,
        permissions: StaticPermissions | None = None,
    ) -> None:
        self.engine = engine or configured_engine()
        self.permissions = permissions or StaticPermissions()

    def is_permitted(
        self,
        sobject_type: SObjectType,
        operation: DmlOperation,
        field: str | None = None,
    ) -> bool:
        return self.permissions.is_permitted(sobject_type, operation, field)

    def query[TRecord: Record](
        self,
        record_type: type[TRecord],
        where: RecordFilter | None = None,
        *,
        limit: int | None = None,
    ) -> list[TRecord]:
        table = TABLE_BY_TYPE[record_type.SOBJECT_TYPE]
        stmt = select(table).order_by(table.c.CreatedDate, table.c.Id)
        if where is not None:
            stmt = stmt.where(*(_condition_clause(table, c) for c in where.conditions))
        if limit is not None:
            stmt = stmt.limit(limit)

        with self.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        api_names = set(record_type.api_names())
        return [
            record_type.from_fields({key: value for key, value in row.items() if key in api_names})
            for row in rows
        ]

    def insert[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]:
        return self._write("insert", records)

    def update[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]:
        return self._write("update", records)

    def upsert[TRecord: Record](self, records: Sequence[TRecord]) -> list[TRecord]:
        return self._write("upsert", records)

    def delete(self, records: Sequence[Record]) -> None:
        if not records:
            return
        with self.engine.begin() as conn:
            validate_batch("delete", records, exists=self._exists_in(conn))
            for sobject_type, group in _group_by_type(records).items():
                table = TABLE_BY_TYPE[sobject_type]
                conn.execute(delete(table).where(table.c.Id.in_([r.id for r in group])))
        log.debug("Deleted %s record(s)", len(records))

    def _write[TRecord: Record](
        self,
        operation: BatchOperation,
        records: Sequence[TRecord],
    ) -> list[TRecord]:
        if not records:
            return list(records)

        assigned: list[tuple[Record, RecordId]] = []
        with self.engine.begin() as conn:
            validate_batch(operation, records, exists=self._exists_in(conn))
            now = datetime.now(tz=UTC)
            for position, record in enumerate(records):
                table = TABLE_BY_TYPE[record.sobject_type]
                if record.id is None:
                    record_id = random_record_id(record.sobject_type)
                    values = record.to_fields(include_id=False, include_none=True)
                    # ids are random, so creation time alone must keep batch order
                    created = now + timedelta(microseconds=position)
                    conn.execute(
                        insert(table).values(
                            Id=record_id,
                            CreatedDate=created,
                            LastModifiedDate=created,
                            **values,
                        )
                    )
                    assigned.append((record, record_id))
                else:
                    values = record.to_fields(include_id=False)
                    conn.execute(
                        update(table)
                        .where(table.c.Id == record.id)
                        .values(LastModifiedDate=now, **values)
                    )

        # ids become visible only once the transaction committed
        for record, record_id in assigned:
            record.id = record_id
        return list(records)

    @staticmethod
    def _exists_in(conn: Connection) -> Exists:
        def exists(sobject_type: SObjectType, record_id: RecordId) -> bool:
            table = TABLE_BY_TYPE[sobject_type]
            stmt = select(table.c.Id).where(table.c.Id == record_id)
            return conn.execute(stmt).first() is not None

        return exists


if TYPE_CHECKING:
    _store_check: RecordStore = SqlAlchemyRecordStore()
