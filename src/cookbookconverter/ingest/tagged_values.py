"""Decoding of Firestore-style tagged value envelopes.

An exported document stores every value inside a single-key envelope naming
its type, e.g. ``{"stringValue": "Soup"}`` or
``{"arrayValue": {"values": [...]}}``. The helpers here unwrap those envelopes
into plain Python values so nothing downstream ever sees the envelope shape.
"""

import re
from collections.abc import Mapping
from typing import Any

from cookbookconverter.ingest.exceptions import DecodeError

TAG_SUFFIX = "Value"

NULL_TAG = "nullValue"
INTEGER_TAG = "integerValue"
ARRAY_TAG = "arrayValue"
MAP_TAG = "mapValue"

_INTEGER_RE = re.compile(r"^\s*[+-]?\d+\s*$")


def _decode_integer(payload: Any) -> int:
    if isinstance(payload, bool):
        raise DecodeError("invalid integer")
    if isinstance(payload, int):
        return payload
    if isinstance(payload, str) and _INTEGER_RE.match(payload):
        return int(payload)
    raise DecodeError("invalid integer")


def _decode_array(payload: Any) -> list[Any] | None:
    if not isinstance(payload, Mapping):
        raise DecodeError("invalid array")
    values = payload.get("values") or []
    if not values:
        return None
    return [decode(value) for value in values]


def _decode_map(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, Mapping):
        raise DecodeError("invalid map")
    fields = payload.get("fields") or {}
    return {name: decode(value) for name, value in fields.items()}


def decode(envelope: Mapping[str, Any] | None) -> Any:
    """
    Decode a tagged value envelope into a plain value.

    Args:
        envelope: The envelope, or None for an absent field.

    Returns:
        The plain value. Empty arrays and blank strings decode to None.

    Raises:
        DecodeError: If the envelope has no ``*Value`` key or an integer
            payload is not a base-10 integer.
    """
    if envelope is None:
        return None
    if not isinstance(envelope, Mapping):
        raise DecodeError("missing value tag")

    tags = [key for key in envelope if isinstance(key, str) and key.endswith(TAG_SUFFIX)]
    if not tags:
        raise DecodeError("missing value tag")

    tag = tags[0]
    payload = envelope[tag]

    if tag == NULL_TAG:
        return None
    if tag == INTEGER_TAG:
        return _decode_integer(payload)
    if tag == ARRAY_TAG:
        return _decode_array(payload)
    if tag == MAP_TAG:
        return _decode_map(payload)

    if isinstance(payload, str) and not payload.strip():
        return None
    return payload


def decode_field(fields: Mapping[str, Any] | None, name: str) -> Any:
    """Decode a named field of a document, treating a missing key as null."""
    if not fields:
        return None
    return decode(fields.get(name))


def document_fields(record: Mapping[str, Any]) -> dict[str, Any]:
    """Return the raw field envelopes of an exported ``{"document": ...}`` record."""
    document = record.get("document") or {}
    return document.get("fields") or {}
