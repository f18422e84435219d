"""
reqguard.tier0_core.logging
────────────────────────────
Library-scoped structured logging. reqguard never calls
``structlog.configure``: every logger it hands out is wrapped with its own
processor chain, and output goes through a single handler on the stdlib
``reqguard`` logger. A host application's structlog setup is left alone.

Configure via: REQGUARD_LOG_LEVEL, REQGUARD_LOG_FORMAT=json|console
"""
from __future__ import annotations

import logging
import sys
from typing import Any, ContextManager

import structlog

_ROOT = "reqguard"

# Request data never reaches a log line, whatever the caller binds.
_HIDDEN_KEYS = frozenset({
    "body", "query", "params", "input", "errors",
    "authorization", "cookie", "password", "token", "secret", "api_key",
})

_HIDDEN = "[REDACTED]"


def _hide_request_data(logger: Any, method: str, event_dict: dict) -> dict:
    for key in event_dict.keys() & _HIDDEN_KEYS:
        event_dict[key] = _HIDDEN
    return event_dict


_PROCESSORS: list[Any] = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    _hide_request_data,
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
]


def _renderer(log_format: str) -> Any:
    if log_format.lower() == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


_handler: logging.Handler | None = None


def _ensure_handler() -> None:
    """Attach reqguard's handler and level on first use, not at import."""
    global _handler
    if _handler is not None:
        return
    from reqguard.tier0_core.config import get_config

    config = get_config()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(config.log_format),
        ],
    ))
    lib_logger = logging.getLogger(_ROOT)
    lib_logger.addHandler(handler)
    lib_logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
    _handler = handler


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Return a structlog logger for a module under ``reqguard``.

        get_logger(__name__).info("request_validation.rejected", section="Body")
    """
    _ensure_handler()
    return structlog.wrap_logger(
        logging.getLogger(name or _ROOT),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
    )


def bound_context(**kwargs: Any) -> ContextManager[None]:
    """Bind per-request fields (path, method) for the length of a ``with`` block."""
    return structlog.contextvars.bound_contextvars(**kwargs)


__all__ = ["get_logger", "bound_context"]
