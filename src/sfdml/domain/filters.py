"""Store-neutral record filters.

Each adapter renders a ``RecordFilter`` in its own query language. Text
comparisons are case-insensitive, matching how the platform compares text in
queries; local stores follow the same rule so reconciliation behaves the same
everywhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sfdml.domain.model import Record


@dataclass(frozen=True, slots=True)
class Equals:
    field: str
    value: object


@dataclass(frozen=True, slots=True)
class In:
    field: str
    values: tuple[object, ...]


type Condition = Equals | In


def fold(value: object) -> object:
    """Normalise a value for comparison (text is case-folded)."""

    if isinstance(value, str):
        return value.casefold()
    return value


@dataclass(frozen=True, slots=True)
class RecordFilter:
    """Conjunction of field conditions; an empty filter matches everything."""

    conditions: tuple[Condition, ...] = ()

    @classmethod
    def equals(cls, field: str, value: object) -> RecordFilter:
        return cls((Equals(field, value),))

    @classmethod
    def within(cls, field: str, values: Iterable[object]) -> RecordFilter:
        return cls((In(field, tuple(values)),))

    def and_(self, *conditions: Condition) -> RecordFilter:
        return RecordFilter(self.conditions + conditions)

    def merge(self, other: RecordFilter) -> RecordFilter:
        return RecordFilter(self.conditions + other.conditions)

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(condition.field for condition in self.conditions)

    def matches(self, record: Record) -> bool:
        for condition in self.conditions:
            actual = fold(record.get_field(condition.field))
            match condition:
                case Equals(value=value):
                    if actual is None or actual != fold(value):
                        return False
                case In(values=values):
                    if actual is None or actual not in {fold(value) for value in values}:
                        return False
        return True
