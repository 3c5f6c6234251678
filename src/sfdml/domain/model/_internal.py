"""Field metadata plumbing shared by record classes."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from functools import cache
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .enums import SObjectType

_API_NAME = "api_name"
_REQUIRED = "required"
_REFERENCES = "references"


@dataclass(frozen=True, slots=True)
class ApiField:
    """Mapping between a Python attribute and its platform API name."""

    attribute: str
    api_name: str
    required: bool = False
    references: SObjectType | None = None


def api_field(
    api_name: str,
    *,
    default: Any = None,
    required: bool = False,
    references: SObjectType | None = None,
) -> Any:
    """Declare a dataclass field that maps onto a platform field."""

    return field(
        default=default,
        metadata={_API_NAME: api_name, _REQUIRED: required, _REFERENCES: references},
    )


@cache
def api_fields(record_cls: type) -> dict[str, ApiField]:
    """Return the API fields of ``record_cls`` keyed by API name, in declaration order."""

    mapping: dict[str, ApiField] = {}
    for dc_field in fields(record_cls):
        api_name = dc_field.metadata.get(_API_NAME)
        if api_name is None:
            continue
        mapping[api_name] = ApiField(
            attribute=dc_field.name,
            api_name=api_name,
            required=bool(dc_field.metadata.get(_REQUIRED, False)),
            references=dc_field.metadata.get(_REFERENCES),
        )
    return mapping
