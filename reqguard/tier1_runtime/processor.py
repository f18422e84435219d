"""
reqguard.tier1_runtime.processor
─────────────────────────────────
Multi-section request validation. A ``RequestProcessor`` is built once from
a ``{section: schema}`` mapping and a mode, then invoked once per request.

Per invocation:
  1. Validate configured sections in order params → body → query.
  2. Stop at the first failure: reject with 400, mutate nothing, never
     call the continuation.
  3. If every section passed and mode is ``process``, replace each
     configured section with its normalized data.
  4. Call the continuation.

Unconfigured sections are never read, validated or mutated.
"""
from __future__ import annotations

from collections.abc import MutableMapping
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping, Protocol, runtime_checkable

from reqguard.tier0_core.errors import RequestValidationError
from reqguard.tier0_core.logging import get_logger
from reqguard.tier1_runtime.respond import ResponseSink, proceed, proceed_sync, reject
from reqguard.tier1_runtime.sections import (
    Mode,
    Section,
    coerce_mode,
    normalize_sections,
)
from reqguard.tier1_runtime.validate import (
    Failure,
    SchemaEngine,
    Success,
    get_engine,
    validate_section,
)


# ── Request views ─────────────────────────────────────────────────────────────

@runtime_checkable
class RequestView(Protocol):
    def get_section(self, section: Section) -> Any: ...
    def set_section(self, section: Section, data: Any) -> None: ...


class AttributeRequestView:
    """Reads and replaces ``request.body`` / ``request.query`` / ``request.params``."""

    def __init__(self, request: Any) -> None:
        self.request = request

    def get_section(self, section: Section) -> Any:
        return getattr(self.request, section.value, None)

    def set_section(self, section: Section, data: Any) -> None:
        setattr(self.request, section.value, data)


class MappingRequestView:
    """Reads and replaces ``request["body"]`` / ``["query"]`` / ``["params"]``."""

    def __init__(self, request: MutableMapping[str, Any]) -> None:
        self.request = request

    def get_section(self, section: Section) -> Any:
        return self.request.get(section.value)

    def set_section(self, section: Section, data: Any) -> None:
        self.request[section.value] = data


def as_request_view(request: Any) -> RequestView:
    if isinstance(request, RequestView):
        return request
    if isinstance(request, MutableMapping):
        return MappingRequestView(request)
    return AttributeRequestView(request)


# ── Section mutator ───────────────────────────────────────────────────────────

def apply_outcome(
    mode: Mode,
    request: RequestView,
    section: Section,
    outcome: Success,
) -> None:
    """Replace the section's data in process mode; do nothing in validate mode."""
    if mode is Mode.PROCESS:
        request.set_section(section, outcome.data)


# ── Orchestrator ──────────────────────────────────────────────────────────────

class RequestProcessor:
    """
    Validates (and in process mode normalizes) the configured sections of
    each request it is called with.

    Usage (any framework whose request has body/query/params attributes)::

        class CreateUser(BaseModel):
            email: str

        guard = process_request({"body": CreateUser})
        await guard(request, response, call_next)
    """

    def __init__(
        self,
        sections: Mapping[Any, Any],
        mode: Mode | str = Mode.PROCESS,
        engine: SchemaEngine | None = None,
    ) -> None:
        self._sections = normalize_sections(sections)
        self._mode = coerce_mode(mode)
        self._engine = engine or get_engine()

    @property
    def sections(self) -> Mapping[Section, Any]:
        return MappingProxyType(dict(self._sections))

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def engine(self) -> SchemaEngine:
        return self._engine

    def __repr__(self) -> str:
        labels = ", ".join(section.value for section, _ in self._sections)
        return f"RequestProcessor(sections=[{labels}], mode={self._mode.value!r})"

    def run(self, request: Any) -> Failure | None:
        """
        Validate every configured section, then mutate on full success.
        Returns the first ``Failure`` in section order, or ``None``.
        """
        view = as_request_view(request)
        passed: list[tuple[Section, Success]] = []

        for section, schema in self._sections:
            outcome = validate_section(
                section, schema, view.get_section(section), self._engine
            )
            if isinstance(outcome, Failure):
                get_logger(__name__).info(
                    "request_validation.rejected",
                    section=section.label,
                    mode=self._mode.value,
                    error_count=_error_count(outcome.errors),
                )
                return outcome
            passed.append((section, outcome))

        for section, outcome in passed:
            apply_outcome(self._mode, view, section, outcome)

        get_logger(__name__).debug(
            "request_validation.passed",
            sections=[section.label for section, _ in passed],
            mode=self._mode.value,
        )
        return None

    def _evaluate(self, request: Any) -> list[Failure]:
        try:
            failure = self.run(request)
        except RequestValidationError as exc:
            # raised by request views that cannot decode a section
            return exc.failures
        return [failure] if failure is not None else []

    async def __call__(
        self,
        request: Any,
        response: ResponseSink,
        call_next: Callable[[], Any | Awaitable[Any]],
    ) -> Any:
        failures = self._evaluate(request)
        if failures:
            reject(response, failures)
            return None
        return await proceed(call_next)

    def handle_sync(
        self,
        request: Any,
        response: ResponseSink,
        call_next: Callable[[], Any],
    ) -> Any:
        """Synchronous form of ``__call__`` for WSGI-style pipelines."""
        failures = self._evaluate(request)
        if failures:
            reject(response, failures)
            return None
        return proceed_sync(call_next)

    def check(self, request: Any) -> None:
        """Run and raise ``RequestValidationError`` instead of writing a response."""
        failures = self._evaluate(request)
        if failures:
            raise RequestValidationError(failures)


def _error_count(errors: Any) -> int | None:
    try:
        return len(errors)
    except TypeError:
        return None


# ── Entry points ──────────────────────────────────────────────────────────────

def process_request(
    sections: Mapping[Any, Any], engine: SchemaEngine | None = None
) -> RequestProcessor:
    """Validate the given sections and replace each with its normalized data."""
    return RequestProcessor(sections, Mode.PROCESS, engine)


def validate_request(
    sections: Mapping[Any, Any], engine: SchemaEngine | None = None
) -> RequestProcessor:
    """Validate the given sections, leaving request data untouched."""
    return RequestProcessor(sections, Mode.VALIDATE, engine)


def process_request_body(schema: Any, engine: SchemaEngine | None = None) -> RequestProcessor:
    return RequestProcessor({Section.BODY: schema}, Mode.PROCESS, engine)


def validate_request_body(schema: Any, engine: SchemaEngine | None = None) -> RequestProcessor:
    return RequestProcessor({Section.BODY: schema}, Mode.VALIDATE, engine)


def process_request_query(schema: Any, engine: SchemaEngine | None = None) -> RequestProcessor:
    return RequestProcessor({Section.QUERY: schema}, Mode.PROCESS, engine)


def validate_request_query(schema: Any, engine: SchemaEngine | None = None) -> RequestProcessor:
    return RequestProcessor({Section.QUERY: schema}, Mode.VALIDATE, engine)


def process_request_params(schema: Any, engine: SchemaEngine | None = None) -> RequestProcessor:
    return RequestProcessor({Section.PARAMS: schema}, Mode.PROCESS, engine)


def validate_request_params(schema: Any, engine: SchemaEngine | None = None) -> RequestProcessor:
    return RequestProcessor({Section.PARAMS: schema}, Mode.VALIDATE, engine)


__all__ = [
    "RequestView",
    "AttributeRequestView",
    "MappingRequestView",
    "as_request_view",
    "apply_outcome",
    "RequestProcessor",
    "process_request",
    "validate_request",
    "process_request_body",
    "validate_request_body",
    "process_request_query",
    "validate_request_query",
    "process_request_params",
    "validate_request_params",
]
