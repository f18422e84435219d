"""
reqguard.tier0_core.errors
───────────────────────────
Error taxonomy for reqguard. Every error carries a stable machine-readable
code, a user-safe message, and the HTTP status code it maps to.

Expected validation failures travel as ``Failure`` values, not exceptions.
``RequestValidationError`` exists for callers that prefer exception-driven
flow (``RequestProcessor.check``) and for request views that fail while
decoding a section.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from reqguard.tier1_runtime.validate import Failure


# ── Base error ────────────────────────────────────────────────────────────────

class ReqGuardError(Exception):
    """
    Base class for all reqguard errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - user_message: safe to surface to end users
    - detail: internal context, never shown to users
    - status_code: HTTP status code for API responses
    """

    status_code: int = 500
    code: str = "internal_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "An unexpected error occurred.",
        detail: str | None = None,
        **metadata: Any,
    ) -> None:
        self.code = code or self.__class__.code
        self.user_message = user_message
        self.detail = detail or user_message
        self.metadata = metadata
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.user_message,
            }
        }


# ── Typed error classes ───────────────────────────────────────────────────────

class RequestValidationError(ReqGuardError):
    """One or more request sections failed schema validation."""
    status_code = 400
    code = "validation_error"

    def __init__(
        self,
        failures: Sequence["Failure"],
        code: str | None = None,
        user_message: str = "Request validation failed.",
        **metadata: Any,
    ) -> None:
        self.failures = list(failures)
        labels = ", ".join(f.section.label for f in self.failures) or "none"
        super().__init__(
            code,
            user_message,
            detail=f"Request validation failed for section(s): {labels}",
            **metadata,
        )

    def to_payload(self) -> list[dict[str, Any]]:
        """Return the rejection wire shape: ``[{"type": ..., "errors": ...}]``."""
        from reqguard.tier1_runtime.respond import rejection_payload
        return rejection_payload(self.failures)

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["error"]["sections"] = self.to_payload()
        return d


class ConfigurationError(ReqGuardError):
    """Misconfiguration detected while building a processor or engine."""
    status_code = 500
    code = "configuration_error"


__all__ = ["ReqGuardError", "RequestValidationError", "ConfigurationError"]
