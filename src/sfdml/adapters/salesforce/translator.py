"""Translate between domain records and Salesforce JSON payloads."""

from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from sfdml.domain.model import SObjectType

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sfdml.domain.model import Record

_DATE_FIELDS: Final[frozenset[tuple[SObjectType, str]]] = frozenset(
    {(SObjectType.OPPORTUNITY, "CloseDate")}
)


def _to_json_value(value: object) -> object:
    match value:
        case StrEnum():
            return str(value)
        case date():
            return value.isoformat()
        case _:
            return value


def to_payload(record: Record, *, include_id: bool) -> dict[str, object]:
    """Return the record as a composite sObject payload.

    Unset fields are omitted so an update never blanks a value it did not touch.
    """

    payload: dict[str, object] = {"attributes": {"type": str(record.sobject_type)}}
    for api_name, value in record.to_fields(include_id=include_id).items():
        payload[api_name] = _to_json_value(value)
    return payload


def from_payload[TRecord: Record](
    record_type: type[TRecord],
    payload: Mapping[str, object],
) -> TRecord:
    """Build a record from a query row, ignoring ``attributes`` and unknown columns."""

    values: dict[str, object] = {}
    for api_name in record_type.api_names():
        if api_name not in payload:
            continue
        value = payload[api_name]
        if (
            isinstance(value, str)
            and (record_type.SOBJECT_TYPE, api_name) in _DATE_FIELDS
        ):
            value = date.fromisoformat(value)
        values[api_name] = value
    return record_type.from_fields(values)
