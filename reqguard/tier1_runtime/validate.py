"""
reqguard.tier1_runtime.validate
────────────────────────────────
Section validation via Pydantic v2. Returns an explicit outcome value
(``Success`` or ``Failure``) instead of raising for the expected
"input did not match" case.

The schema engine sits behind a narrow protocol so another validation
library can be dropped in without touching orchestration.

Select via: REQGUARD_SCHEMA_ENGINE=pydantic
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, NamedTuple, Protocol, Union, runtime_checkable

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from reqguard.tier1_runtime.sections import Section


# ── Outcomes ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Success:
    """Schema matched. ``data`` holds only the fields the schema declares."""
    data: Any


@dataclass(frozen=True)
class Failure:
    """Schema did not match. ``errors`` is the engine's diagnostic, verbatim."""
    section: Section
    errors: Any


ValidationOutcome = Union[Success, Failure]


# ── Engine protocol ───────────────────────────────────────────────────────────

class EngineResult(NamedTuple):
    ok: bool
    value: Any   # normalized data when ok, diagnostic otherwise


@runtime_checkable
class SchemaEngine(Protocol):
    def validate(self, schema: Any, data: Any) -> EngineResult: ...


# ── Pydantic engine ───────────────────────────────────────────────────────────

@lru_cache(maxsize=256)
def _cached_adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def _adapter_for(schema: Any) -> TypeAdapter:
    try:
        return _cached_adapter(schema)
    except TypeError:
        # unhashable schema, e.g. Annotated[..., Field(...)] with list metadata
        return TypeAdapter(schema)


class PydanticSchemaEngine:
    """
    Validates with ``pydantic.TypeAdapter``. A schema may be a ``BaseModel``
    subclass, a ``TypedDict``, a dataclass, or any annotated type Pydantic
    accepts.

    Unknown keys are dropped according to the schema's own ``extra`` setting
    (Pydantic's default is ``"ignore"``). Normalized data is dumped with
    field aliases so it keeps the shape clients send.
    """

    def __init__(
        self,
        include_url: bool | None = None,
        include_input: bool | None = None,
        include_context: bool | None = None,
    ) -> None:
        from reqguard.tier0_core.config import get_config

        config = get_config()
        self.include_url = config.error_include_url if include_url is None else include_url
        self.include_input = (
            config.error_include_input if include_input is None else include_input
        )
        self.include_context = (
            config.error_include_context if include_context is None else include_context
        )

    def validate(self, schema: Any, data: Any) -> EngineResult:
        adapter = _adapter_for(schema)
        try:
            value = adapter.validate_python(data)
        except PydanticValidationError as exc:
            diagnostic = json.loads(
                exc.json(
                    include_url=self.include_url,
                    include_input=self.include_input,
                    include_context=self.include_context,
                )
            )
            return EngineResult(False, diagnostic)
        return EngineResult(True, adapter.dump_python(value, by_alias=True))


# ── Engine registry ───────────────────────────────────────────────────────────

_engine: SchemaEngine | None = None


def _build_engine() -> SchemaEngine:
    from reqguard.tier0_core.config import get_config

    name = get_config().schema_engine.lower()
    if name == "pydantic":
        return PydanticSchemaEngine()
    from reqguard.tier0_core.errors import ConfigurationError
    raise ConfigurationError(
        "unknown_schema_engine",
        f"Unknown REQGUARD_SCHEMA_ENGINE={name!r}. Valid: pydantic",
    )


def get_engine() -> SchemaEngine:
    global _engine
    if _engine is None:
        _engine = _build_engine()
    return _engine


def set_engine(engine: SchemaEngine) -> None:
    """Install the default engine used by processors built without one."""
    global _engine
    _engine = engine


def _reset_engine() -> None:
    global _engine
    _engine = None


# ── Public API ────────────────────────────────────────────────────────────────

def validate_section(
    section: Section,
    schema: Any,
    raw: Any,
    engine: SchemaEngine | None = None,
) -> ValidationOutcome:
    """
    Validate one section's raw data against its schema.

    An absent section (``None``) is validated as an empty mapping, so the
    schema's own optional/required rules decide the result.

    Usage:
        class CreateUser(BaseModel):
            email: str

        outcome = validate_section(Section.BODY, CreateUser, {"email": "a@b.c"})
        if isinstance(outcome, Failure):
            ...
    """
    result = (engine or get_engine()).validate(schema, {} if raw is None else raw)
    if result.ok:
        return Success(result.value)
    return Failure(section, result.value)


__all__ = [
    "Success",
    "Failure",
    "ValidationOutcome",
    "EngineResult",
    "SchemaEngine",
    "PydanticSchemaEngine",
    "get_engine",
    "set_engine",
    "validate_section",
]
