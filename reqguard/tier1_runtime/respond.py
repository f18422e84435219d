"""
reqguard.tier1_runtime.respond
───────────────────────────────
Response emission: either a terminal 400 rejection carrying the failing
section's diagnostic, or a continuation into the rest of the pipeline.
Exactly one of the two happens per invocation.

Rejection wire shape::

    [{"type": "Body" | "Query" | "Params", "errors": <diagnostic>}]
"""
from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Protocol, Sequence, runtime_checkable

from reqguard.tier0_core.http import HTTP
from reqguard.tier1_runtime.validate import Failure


@runtime_checkable
class ResponseSink(Protocol):
    def send(self, status_code: int, payload: Any) -> None: ...


class BufferedResponse:
    """
    Write-once ``ResponseSink`` that records what was sent.
    Framework adapters flush it to the wire after the processor returns.
    """

    def __init__(self) -> None:
        self.status_code: int | None = None
        self.payload: Any = None
        self.sent = False

    def send(self, status_code: int, payload: Any) -> None:
        if self.sent:
            raise RuntimeError("Response has already been sent.")
        self.status_code = status_code
        self.payload = payload
        self.sent = True


def rejection_payload(failures: Sequence[Failure]) -> list[dict[str, Any]]:
    return [{"type": f.section.label, "errors": f.errors} for f in failures]


def reject(response: ResponseSink, failures: Sequence[Failure]) -> None:
    """Send a 400 with the structured rejection payload."""
    response.send(HTTP.BAD_REQUEST, rejection_payload(failures))


async def proceed(call_next: Callable[[], Any | Awaitable[Any]]) -> Any:
    result = call_next()
    if inspect.isawaitable(result):
        result = await result
    return result


def proceed_sync(call_next: Callable[[], Any]) -> Any:
    return call_next()


__all__ = [
    "ResponseSink",
    "BufferedResponse",
    "rejection_payload",
    "reject",
    "proceed",
    "proceed_sync",
]
