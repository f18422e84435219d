"""
reqguard.tier0_core.http
─────────────────────────
HTTP primitives shared by the response emitter and the framework adapters.
"""
from __future__ import annotations

from http import HTTPStatus


# ── Status code constants ──────────────────────────────────────────────────

class HTTP:
    """HTTP status codes used by reqguard."""

    BAD_REQUEST = 400


# ── Helpers ───────────────────────────────────────────────────────────────

def status_line(code: int) -> str:
    """Return a WSGI status line, e.g. ``"400 Bad Request"``."""
    try:
        phrase = HTTPStatus(code).phrase
    except ValueError:
        return str(code)
    return f"{code} {phrase}"


JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


__all__ = ["HTTP", "status_line", "JSON_CONTENT_TYPE", "FORM_CONTENT_TYPE"]
