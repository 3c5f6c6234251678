"""Natural-key index built once per reconciliation call."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from sfdml.domain.model import Record

log = getLogger(__name__)


def normalize_key(key: str) -> str:
    """Fold a natural key exactly as ``filters.fold`` folds text for store queries."""

    return key.casefold()


class NaturalKeyIndex[TRecord: Record]:
    """Mapping from natural key to the single record that owns it.

    The index is never shared between reconciliation calls; each call builds its
    own from a fresh fetch.
    """

    def __init__(self, key_field: str) -> None:
        self.key_field = key_field
        self._records: dict[str, TRecord] = {}

    @classmethod
    def from_records(cls, records: Iterable[TRecord], key_field: str) -> NaturalKeyIndex[TRecord]:
        index = cls(key_field)
        for record in records:
            value = record.get_field(key_field)
            if not isinstance(value, str):
                continue
            existing = index.get(value)
            if existing is not None:
                log.warning(
                    "Store holds several %s records with %s=%r; reusing %s, ignoring %s",
                    record.sobject_type,
                    key_field,
                    value,
                    existing.id,
                    record.id,
                )
                continue
            index.add(value, record)
        return index

    def get(self, key: str) -> TRecord | None:
        return self._records.get(normalize_key(key))

    def add(self, key: str, record: TRecord) -> None:
        normalized = normalize_key(key)
        if normalized in self._records:
            raise ValueError(f"Natural key {key!r} is already indexed")
        self._records[normalized] = record

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalize_key(key) in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def records(self) -> list[TRecord]:
        return list(self._records.values())
