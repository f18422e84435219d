"""
reqguard test configuration.

Forces test settings before any reqguard module reads configuration and
resets cached singletons between tests so no state bleeds across them.
"""
from __future__ import annotations

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

# ── Force test settings ───────────────────────────────────────────────────
# These must be set before any reqguard modules are imported.

os.environ.setdefault("REQGUARD_LOG_LEVEL", "WARNING")
os.environ.setdefault("REQGUARD_LOG_FORMAT", "console")
os.environ.setdefault("REQGUARD_SCHEMA_ENGINE", "pydantic")


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_module_singletons():
    """Restore the default schema engine and config cache after each test."""
    import reqguard.tier1_runtime.validate as _validate
    from reqguard.tier0_core.config import _reset_config

    orig_engine = _validate._engine

    yield

    _validate._engine = orig_engine
    _reset_config()


@pytest.fixture
def make_request():
    """Build an attribute-style request (body/query/params)."""
    def _make(body=None, query=None, params=None):
        return SimpleNamespace(body=body, query=query, params=params)
    return _make


@pytest.fixture
def response():
    """A ResponseSink double; inspect ``response.send`` calls."""
    return Mock(spec_set=["send"])


@pytest.fixture
def call_next():
    return AsyncMock(return_value="downstream")
