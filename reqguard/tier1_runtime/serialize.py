"""
reqguard.tier1_runtime.serialize
─────────────────────────────────
Wire encoding for the framework adapters: JSON rejection payloads, request
body decoding/re-encoding, and query string parsing/re-encoding.
"""
from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qs, urlencode

from pydantic import TypeAdapter
from pydantic_core import to_jsonable_python

from reqguard.tier0_core.http import FORM_CONTENT_TYPE

_ANY: TypeAdapter[Any] = TypeAdapter(Any)


def serialize(obj: Any) -> bytes:
    """
    Serialize a payload to JSON bytes. Pydantic models, datetimes, UUIDs and
    other types Pydantic knows are converted first.

    Usage:
        data = serialize([{"type": "Body", "errors": [...]}])
    """
    return json.dumps(to_jsonable_python(obj), separators=(",", ":")).encode()


# ── Query strings ─────────────────────────────────────────────────────────

def parse_query(query_string: str | bytes) -> dict[str, Any]:
    """
    Parse a query string. Keys seen once map to a string, repeated keys to a
    list of strings. Blank values are kept.
    """
    if isinstance(query_string, bytes):
        query_string = query_string.decode("latin-1")
    parsed = parse_qs(query_string, keep_blank_values=True)
    return {k: v[0] if len(v) == 1 else v for k, v in parsed.items()}


def _query_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    jsonable = to_jsonable_python(value)
    return jsonable if isinstance(jsonable, str) else str(jsonable)


def encode_query(data: Any) -> str:
    if not data:
        return ""
    pairs: list[tuple[str, str]] = []
    for key, value in dict(data).items():
        if isinstance(value, (list, tuple)):
            pairs.extend((str(key), _query_value(v)) for v in value)
        else:
            pairs.append((str(key), _query_value(value)))
    return urlencode(pairs)


# ── Bodies ────────────────────────────────────────────────────────────────

def _is_form(content_type: str | None) -> bool:
    return bool(content_type) and content_type.split(";")[0].strip().lower() == FORM_CONTENT_TYPE


def decode_body(raw: bytes, content_type: str | None = None) -> Any:
    """
    Decode a request body. Empty bodies decode to ``None``. Form-encoded
    bodies decode like query strings; anything else is parsed as JSON.

    Raises ``pydantic.ValidationError`` (type ``json_invalid``) on malformed
    JSON, so the diagnostic matches the schema engine's own errors.
    """
    if not raw:
        return None
    if _is_form(content_type):
        return parse_query(raw.decode("utf-8", errors="replace"))
    return _ANY.validate_json(raw)


def encode_body(data: Any, content_type: str | None = None) -> bytes:
    if _is_form(content_type):
        return encode_query(data).encode("utf-8")
    return serialize(data)


__all__ = ["serialize", "parse_query", "encode_query", "decode_body", "encode_body"]
