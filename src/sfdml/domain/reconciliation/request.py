"""Reconciliation request types."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from sfdml.domain.filters import Equals, RecordFilter

if TYPE_CHECKING:
    from sfdml.domain.model import Record, RecordId

type FieldSetter[TRecord: Record] = Callable[[TRecord, str], None]


def check_keys(keys: Sequence[str]) -> None:
    """Reject natural keys that are not non-blank strings."""

    for key in keys:
        if not isinstance(key, str) or not key.strip():
            raise ValueError(f"Natural keys must be non-blank strings, got {key!r}")


@dataclass(frozen=True, slots=True)
class Scope:
    """Equality constraints on parent references, e.g. ``AccountId == 001...``.

    A scope names committed parents only: every value must be a real id.
    """

    fields: Mapping[str, RecordId] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        for api_name, value in self.fields.items():
            if value is None or not str(value).strip():
                raise ValueError(
                    f"Scope field {api_name} has no id; commit the parent record first"
                )
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @classmethod
    def unscoped(cls) -> Scope:
        return cls()

    @classmethod
    def under(cls, parent_field: str, parent_id: RecordId | None) -> Scope:
        return cls({parent_field: parent_id})  # type: ignore[dict-item]

    @property
    def is_scoped(self) -> bool:
        return bool(self.fields)

    def as_filter(self) -> RecordFilter:
        return RecordFilter(tuple(Equals(name, value) for name, value in self.fields.items()))

    def apply_to(self, record: Record) -> None:
        for api_name, value in self.fields.items():
            record.set_field(api_name, value)


@dataclass(frozen=True, kw_only=True)
class ReconciliationRequest[TRecord: Record]:
    """Desired records of one type, described by natural key within a scope."""

    record_type: type[TRecord]
    key_field: str
    keys: Sequence[str]
    scope: Scope = field(default_factory=Scope.unscoped)
    apply_fields: FieldSetter[TRecord] | None = None

    def __post_init__(self) -> None:
        if not self.record_type.has_field(self.key_field):
            raise ValueError(
                f"{self.record_type.SOBJECT_TYPE} has no natural key field {self.key_field!r}"
            )
        if self.key_field == "Id":
            raise ValueError("The natural key must not be the store-assigned Id")
        check_keys(self.keys)
        for api_name in self.scope.fields:
            if not self.record_type.has_field(api_name):
                raise ValueError(f"{self.record_type.SOBJECT_TYPE} has no scope field {api_name!r}")
