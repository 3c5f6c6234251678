"""Record identifier helpers.

Platform ids are 15 case-sensitive characters, optionally followed by a
three-character checksum that makes the 18-character form case-insensitive.
The first three characters are the key prefix of the object type.
"""

from __future__ import annotations

import re
import string
import uuid
from typing import Final

from .enums import SObjectType

type RecordId = str

RECORD_ID_PATTERN: Final = re.compile(r"^[a-zA-Z0-9]{15}(?:[a-zA-Z0-9]{3})?$")

_BASE62: Final = string.digits + string.ascii_uppercase + string.ascii_lowercase
_CHECKSUM_ALPHABET: Final = string.ascii_uppercase + "012345"
_BODY_LENGTH: Final = 12


def is_record_id(value: object) -> bool:
    return isinstance(value, str) and RECORD_ID_PATTERN.match(value) is not None


def to_18_char(record_id: RecordId) -> RecordId:
    """Append the case-insensitivity checksum to a 15-character id."""

    if len(record_id) == 18:
        return record_id
    if len(record_id) != 15 or not is_record_id(record_id):
        raise ValueError(f"Not a record id: {record_id!r}")

    suffix = ""
    for chunk_start in range(0, 15, 5):
        chunk = record_id[chunk_start : chunk_start + 5]
        bits = 0
        for position, char in enumerate(chunk):
            if char.isupper():
                bits |= 1 << position
        suffix += _CHECKSUM_ALPHABET[bits]
    return record_id + suffix


def sobject_type_of(record_id: RecordId) -> SObjectType:
    return SObjectType.from_key_prefix(record_id[:3])


def _base62(number: int, width: int) -> str:
    if number < 0:
        raise ValueError("Identifier numbers must be non-negative")
    digits: list[str] = []
    remaining = number
    while remaining:
        remaining, remainder = divmod(remaining, 62)
        digits.append(_BASE62[remainder])
    encoded = "".join(reversed(digits)) or "0"
    if len(encoded) > width:
        raise ValueError(f"Identifier body overflow for {number}")
    return encoded.rjust(width, "0")


def make_record_id(sobject_type: SObjectType, number: int) -> RecordId:
    """Build a deterministic 18-character id from a sequence number."""

    return to_18_char(sobject_type.key_prefix + _base62(number, _BODY_LENGTH))


def random_record_id(sobject_type: SObjectType) -> RecordId:
    """Build a random 18-character id for stores without a sequence."""

    return make_record_id(sobject_type, uuid.uuid4().int % (62**_BODY_LENGTH))
