"""Reconciling upsert: make exactly one record exist per natural key in a scope.

Phases, in order:
1) fetch: one query for ``scope AND key IN keys``, indexed by natural key
2) merge: reuse indexed records, create the missing ones, apply fields
3) commit: one ``upsert`` call for the whole merged batch

Parents referenced through the scope must already be committed; ``Scope``
refuses null ids, so children can never be built against a missing parent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from sfdml.domain.filters import In
from sfdml.domain.model import DmlOperation

from .index import NaturalKeyIndex

if TYPE_CHECKING:
    from sfdml.domain.authorization import AuthorizationDecision, AuthorizationPolicy
    from sfdml.domain.model import Record
    from sfdml.domain.ports import RecordStore

    from .request import ReconciliationRequest

log = getLogger(__name__)


@dataclass(kw_only=True)
class ReconciliationResult[TRecord: Record]:
    """Outcome of one reconciliation run.

    ``records`` holds one record per distinct key, in first-seen key order.
    ``by_key`` maps every requested key (duplicates included) to its record.
    """

    records: list[TRecord] = field(default_factory=list)
    by_key: dict[str, TRecord] = field(default_factory=dict)
    created: int = 0
    reused: int = 0
    committed: bool = False
    denied: AuthorizationDecision | None = None

    def record_for(self, key: str) -> TRecord:
        return self.by_key[key]

    @property
    def ids(self) -> list[str | None]:
        return [record.id for record in self.records]


@dataclass
class MergeOutcome[TRecord: Record]:
    records: list[TRecord]
    by_key: dict[str, TRecord]
    created: list[TRecord]
    reused: list[TRecord]


def fetch_existing[TRecord: Record](
    store: RecordStore,
    request: ReconciliationRequest[TRecord],
) -> NaturalKeyIndex[TRecord]:
    """Load existing records for the requested keys with a single query."""

    keys = tuple(dict.fromkeys(request.keys))
    where = request.scope.as_filter().and_(In(request.key_field, keys))
    existing = store.query(request.record_type, where)
    return NaturalKeyIndex.from_records(existing, request.key_field)


def merge_records[TRecord: Record](
    request: ReconciliationRequest[TRecord],
    index: NaturalKeyIndex[TRecord],
) -> MergeOutcome[TRecord]:
    """Reuse or create one record per key and apply the requested fields."""

    records: list[TRecord] = []
    by_key: dict[str, TRecord] = {}
    created: list[TRecord] = []
    reused: list[TRecord] = []
    seen: set[int] = set()

    for key in request.keys:
        record = index.get(key)
        if record is None:
            record = request.record_type()
            record.set_field(request.key_field, key)
            request.scope.apply_to(record)
            index.add(key, record)
            created.append(record)
        elif id(record) not in seen:
            reused.append(record)
        if request.apply_fields is not None:
            request.apply_fields(record, key)
        by_key[key] = record
        if id(record) not in seen:
            seen.add(id(record))
            records.append(record)

    return MergeOutcome(records=records, by_key=by_key, created=created, reused=reused)


def _written_fields(records: list[Record]) -> tuple[str, ...]:
    names: dict[str, None] = {}
    for record in records:
        names.update(dict.fromkeys(record.to_fields(include_id=False)))
    return tuple(names)


@dataclass(slots=True)
class ReconcilingUpsert:
    """Run fetch, merge and commit for a reconciliation request."""

    store: RecordStore
    authorization: AuthorizationPolicy

    def reconcile[TRecord: Record](
        self,
        request: ReconciliationRequest[TRecord],
    ) -> ReconciliationResult[TRecord]:
        if not request.keys:
            return ReconciliationResult()

        index = fetch_existing(self.store, request)
        outcome = merge_records(request, index)
        result = ReconciliationResult(
            records=outcome.records,
            by_key=outcome.by_key,
            created=len(outcome.created),
            reused=len(outcome.reused),
        )

        sobject_type = request.record_type.SOBJECT_TYPE
        for operation, batch in (
            (DmlOperation.CREATE, outcome.created),
            (DmlOperation.UPDATE, outcome.reused),
        ):
            if not batch:
                continue
            decision = self.authorization.authorize(sobject_type, operation, _written_fields(batch))
            if not decision.allowed:
                result.denied = decision
                return result

        self.store.upsert(outcome.records)
        result.committed = True
        log.info(
            "Reconciled %s by %s: created=%s, reused=%s",
            sobject_type,
            request.key_field,
            result.created,
            result.reused,
        )
        return result
