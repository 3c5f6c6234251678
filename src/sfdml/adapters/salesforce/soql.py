"""Render record filters as SOQL."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sfdml.domain.filters import Equals, In

if TYPE_CHECKING:
    from sfdml.domain.filters import Condition, RecordFilter
    from sfdml.domain.model import Record

_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def quote(value: object) -> str:
    """Return ``value`` as a SOQL literal."""

    match value:
        case None:
            return "null"
        case bool():
            return "true" if value else "false"
        case int() | float():
            return repr(value)
        case datetime():
            return value.isoformat()
        case date():
            return value.isoformat()
        case str():
            escaped = "".join(_ESCAPES.get(char, char) for char in value)
            return f"'{escaped}'"
        case _:
            raise TypeError(f"Cannot render {type(value).__name__} as a SOQL literal")


def render_condition(condition: Condition) -> str:
    match condition:
        case Equals(field=field, value=value):
            return f"{field} = {quote(value)}"
        case In(field=field, values=values):
            return f"{field} IN ({', '.join(quote(value) for value in values)})"
    raise TypeError(f"Unsupported condition: {condition!r}")


def build_select(
    record_type: type[Record],
    where: RecordFilter | None = None,
    *,
    limit: int | None = None,
) -> str:
    """Build a ``SELECT`` over every field ``record_type`` declares.

    Text comparisons are case-insensitive on the platform, matching the local
    stores.
    """

    soql = f"SELECT {', '.join(record_type.api_names())} FROM {record_type.SOBJECT_TYPE}"
    if where is not None and where.conditions:
        soql += " WHERE " + " AND ".join(render_condition(c) for c in where.conditions)
    soql += " ORDER BY CreatedDate, Id"
    if limit is not None:
        soql += f" LIMIT {limit}"
    return soql
