"""Encode/decode Python values to/from Firestore REST API 'fields' format.

Documents are shared with the web client, so decoding accepts every value
kind the JS SDK can write (references and geo points included) even though
this service never writes them.
"""

import base64
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any


def _encode_value(v: Any) -> dict:
    if v is None:
        return {"nullValue": None}
    if isinstance(v, bool):
        return {"booleanValue": v}
    if isinstance(v, int):
        return {"integerValue": str(v)}
    if isinstance(v, float):
        return {"doubleValue": v}
    if isinstance(v, datetime):
        if v.tzinfo is not None:
            v = v.astimezone(UTC)
        return {"timestampValue": v.strftime("%Y-%m-%dT%H:%M:%S.%fZ")}
    if isinstance(v, str):
        return {"stringValue": v}
    if isinstance(v, bytes):
        return {"bytesValue": base64.standard_b64encode(v).decode("ascii")}
    if isinstance(v, (list, tuple)):
        return {"arrayValue": {"values": [_encode_value(x) for x in v]}}
    if isinstance(v, dict):
        return {"mapValue": {"fields": {k: _encode_value(x) for k, x in v.items()}}}
    raise TypeError(f"Unsupported Firestore value type: {type(v)}")


def encode_document(data: dict[str, Any]) -> dict:
    """Convert a Python dict to Firestore REST Document format ({"fields": ...})."""
    return {"fields": {k: _encode_value(v) for k, v in data.items()}}


def _parse_timestamp(raw: str) -> datetime:
    """Parse an RFC 3339 timestamp; Firestore may send up to 9 fractional digits."""
    text = raw.replace("Z", "+00:00")
    if "." in text:
        head, _, rest = text.partition(".")
        digits = ""
        while rest and rest[0].isdigit():
            digits, rest = digits + rest[0], rest[1:]
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest}"
    return datetime.fromisoformat(text)


_DECODERS: dict[str, Callable[[Any], Any]] = {
    "nullValue": lambda raw: None,
    "booleanValue": bool,
    "integerValue": int,
    "doubleValue": float,
    "timestampValue": _parse_timestamp,
    "stringValue": str,
    "bytesValue": base64.standard_b64decode,
    "referenceValue": str,
    "geoPointValue": dict,
    "arrayValue": lambda raw: [_decode_value(x) for x in (raw or {}).get("values") or []],
    "mapValue": lambda raw: decode_fields((raw or {}).get("fields")),
}


def _decode_value(obj: dict) -> Any:
    for kind, raw in obj.items():
        decoder = _DECODERS.get(kind)
        if decoder is not None:
            return decoder(raw)
    return None


def decode_fields(fields: dict | None) -> dict:
    """Convert a Firestore REST Document.fields map to a Python dict."""
    if not fields:
        return {}
    return {k: _decode_value(v) for k, v in fields.items()}
