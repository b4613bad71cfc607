"""
Document identifiers.

An _id is either a natural number (assigned from the collection's
auto-increment counter) or an RFC 4122 version 4 UUID string (assigned
when the caller inserts with ``_id="uuid"``).
"""

from __future__ import annotations

import re
import uuid
from typing import Any

from kvdoc.core.errors import InvalidIdentifierError

UUID_SENTINEL = "uuid"

_UUID_V4 = re.compile(
    r"[0-9A-F]{8}-[0-9A-F]{4}-4[0-9A-F]{3}-[89AB][0-9A-F]{3}-[0-9A-F]{12}",
    re.IGNORECASE,
)
_COLLECTION_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def is_natural_number(value: Any) -> bool:
    """True for 0, 1, 2, ... (integral floats included, bools excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value >= 0
    if isinstance(value, float):
        return value.is_integer() and value >= 0
    return False


def is_uuid_v4(value: Any) -> bool:
    """True for a 36-char UUID v4 string, any letter case."""
    return isinstance(value, str) and _UUID_V4.fullmatch(value) is not None


def is_valid_document_id(value: Any) -> bool:
    return is_natural_number(value) or is_uuid_v4(value)


def normalize_document_id(value: Any) -> int | str:
    """Integral floats become ints; everything else is returned unchanged."""
    if isinstance(value, float):
        return int(value)
    return value


def validate_document_id(value: Any, name: str = "document_id", path: str = "") -> int | str:
    """Return the normalized id or raise InvalidIdentifierError."""
    prefix = f"{path}, " if path else ""
    if value is None:
        raise InvalidIdentifierError(f"{prefix}{name} can't be None")
    if not is_valid_document_id(value):
        raise InvalidIdentifierError(
            f"{prefix}invalid {name} {value!r}, expecting natural number or UUID v4",
            details={"value": repr(value)},
        )
    return normalize_document_id(value)


def generate_uuid_v4() -> str:
    """Random UUID v4, upper-case hex."""
    return str(uuid.uuid4()).upper()


def is_valid_collection_name(name: Any) -> bool:
    """Collection names must be usable as attribute names."""
    return isinstance(name, str) and _COLLECTION_NAME.fullmatch(name) is not None
