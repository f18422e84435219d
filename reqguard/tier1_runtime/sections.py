"""
reqguard.tier1_runtime.sections
────────────────────────────────
Request sections, mutation modes, and section-config normalization.

Sections are always visited in a fixed order: params, then body, then query.
That order decides which failure is reported when several sections are
invalid at once.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Mapping


class Section(str, Enum):
    """One independently-schema'd part of an inbound request."""
    PARAMS = "params"
    BODY = "body"
    QUERY = "query"

    @property
    def label(self) -> str:
        """Wire label used in rejection payloads ("Params", "Body", "Query")."""
        return self.value.capitalize()


class Mode(str, Enum):
    """Whether a successful run replaces section data or leaves it alone."""
    PROCESS = "process"
    VALIDATE = "validate"


SECTION_ORDER: tuple[Section, ...] = (Section.PARAMS, Section.BODY, Section.QUERY)


def _coerce_section(key: Any) -> Section:
    from reqguard.tier0_core.errors import ConfigurationError

    if isinstance(key, Section):
        return key
    if isinstance(key, str):
        try:
            return Section(key.lower())
        except ValueError:
            pass
    raise ConfigurationError(
        "unknown_section",
        f"Unknown request section {key!r}. Valid: body, query, params.",
    )


def normalize_sections(config: Mapping[Any, Any]) -> tuple[tuple[Section, Any], ...]:
    """
    Turn a ``{section: schema}`` mapping into an ordered, immutable tuple.

    Keys may be ``Section`` members or their string names. Entries whose
    schema is ``None`` count as not configured.

    Usage:
        normalize_sections({"query": QueryModel, "params": PathModel})
        # → ((Section.PARAMS, PathModel), (Section.QUERY, QueryModel))
    """
    from reqguard.tier0_core.errors import ConfigurationError

    if not isinstance(config, Mapping):
        raise ConfigurationError(
            "invalid_section_config",
            f"Section config must be a mapping, got {type(config).__name__}.",
        )

    configured: dict[Section, Any] = {}
    for key, schema in config.items():
        section = _coerce_section(key)
        if schema is None:
            continue
        if section in configured:
            raise ConfigurationError(
                "duplicate_section",
                f"Section {section.value!r} is configured more than once.",
            )
        configured[section] = schema

    return tuple(
        (section, configured[section])
        for section in SECTION_ORDER
        if section in configured
    )


def coerce_mode(mode: Mode | str) -> Mode:
    from reqguard.tier0_core.errors import ConfigurationError

    try:
        return Mode(mode)
    except ValueError:
        raise ConfigurationError(
            "unknown_mode",
            f"Unknown mode {mode!r}. Valid: process, validate.",
        ) from None


__all__ = ["Section", "Mode", "SECTION_ORDER", "normalize_sections", "coerce_mode"]
