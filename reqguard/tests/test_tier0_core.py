"""Tests for tier0_core modules."""
from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path

import structlog

from reqguard.tier0_core.config import ReqGuardConfig, _reset_config, get_config
from reqguard.tier0_core.errors import (
    ConfigurationError,
    ReqGuardError,
    RequestValidationError,
)
from reqguard.tier0_core.http import HTTP, status_line
from reqguard.tier0_core.logging import _HIDDEN, _hide_request_data, get_logger
from reqguard.tier1_runtime.processor import process_request
from reqguard.tier1_runtime.sections import Section
from reqguard.tier1_runtime.validate import Failure

_REPO_ROOT = Path(__file__).resolve().parents[2]


# ── errors ─────────────────────────────────────────────────────────────────

class TestErrors:
    def test_base_error_has_code(self):
        e = ReqGuardError("something_broke", user_message="Something broke")
        assert e.code == "something_broke"
        assert "Something broke" in str(e)
        assert e.status_code == 500

    def test_configuration_error(self):
        e = ConfigurationError(user_message="Bad config")
        assert isinstance(e, ReqGuardError)
        assert e.code == "configuration_error"

    def test_request_validation_error_payload(self):
        e = RequestValidationError([Failure(Section.BODY, [{"loc": ["a"]}])])
        assert e.status_code == 400
        assert e.code == "validation_error"
        assert "Body" in str(e)
        assert e.to_payload() == [{"type": "Body", "errors": [{"loc": ["a"]}]}]

    def test_request_validation_error_to_dict(self):
        e = RequestValidationError([Failure(Section.QUERY, ["x"])])
        d = e.to_dict()
        assert d["error"]["code"] == "validation_error"
        assert d["error"]["sections"] == [{"type": "Query", "errors": ["x"]}]
# ── http ───────────────────────────────────────────────────────────────────

class TestHttp:
    def test_status_codes(self):
        assert HTTP.BAD_REQUEST == 400

    def test_status_line(self):
        assert status_line(400) == "400 Bad Request"
        assert status_line(200) == "200 OK"
        assert status_line(599) == "599"


# ── config ─────────────────────────────────────────────────────────────────

class TestConfig:
    def test_defaults(self):
        config = get_config()
        assert config.schema_engine == "pydantic"
        assert config.error_include_url is False
        assert config.error_include_input is True

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("REQGUARD_ERROR_INCLUDE_URL", "true")
        _reset_config()
        assert get_config().error_include_url is True

    def test_config_is_cached(self):
        assert get_config() is get_config()

    def test_unknown_log_format_falls_back_to_json(self):
        assert ReqGuardConfig(REQGUARD_LOG_FORMAT="xml").log_format == "json"
        assert ReqGuardConfig(REQGUARD_LOG_FORMAT="CONSOLE").log_format == "console"

    def test_host_app_env_is_ignored(self, monkeypatch, make_request):
        monkeypatch.setenv("APP_ENV", "prod")
        monkeypatch.setenv("REQGUARD_LOG_FORMAT", "xml")
        _reset_config()
        assert get_config().log_format == "json"

        request = make_request(body={"a": 1})
        process_request({"body": dict}).check(request)
        assert request.body == {"a": 1}

    def test_import_with_foreign_app_env(self):
        env = dict(os.environ, APP_ENV="prod", REQGUARD_LOG_FORMAT="xml")
        result = subprocess.run(
            [
                sys.executable,
                "-c",
                "import reqguard; reqguard.process_request({}).check({})",
            ],
            cwd=_REPO_ROOT,
            env=env,
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, result.stderr


# ── logging ────────────────────────────────────────────────────────────────

class TestLogging:
    def test_get_logger_returns_logger(self):
        log = get_logger("reqguard.test")
        assert hasattr(log, "info")

    def test_hides_sensitive_and_request_data_keys(self):
        event = {"event": "x", "token": "abc", "body": {"a": 1}, "section": "Body"}
        result = _hide_request_data(None, "info", event)
        assert result["token"] == _HIDDEN
        assert result["body"] == _HIDDEN
        assert result["section"] == "Body"

    def test_host_structlog_config_untouched(self, make_request):
        before = structlog.get_config()

        get_logger("reqguard.test").warning("reqguard.test_event")
        process_request({"body": dict}).run(make_request(body="not a dict"))
        process_request({"body": dict}).run(make_request(body={"a": 1}))

        after = structlog.get_config()
        assert after == before
        assert after["processors"] is before["processors"]
        assert after["logger_factory"] is before["logger_factory"]

    def test_handler_attached_once(self):
        get_logger("reqguard.a")
        get_logger("reqguard.b")
        handlers = logging.getLogger("reqguard").handlers
        assert len(handlers) == 1
