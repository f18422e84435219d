"""
reqguard
────────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from reqguard.tier0_core.logging import get_logger
from reqguard.tier0_core.errors import (
    ReqGuardError,
    RequestValidationError,
    ConfigurationError,
)
from reqguard.tier0_core.config import get_config, ReqGuardConfig

from reqguard.tier1_runtime.sections import Section, Mode, SECTION_ORDER
from reqguard.tier1_runtime.validate import (
    Success,
    Failure,
    SchemaEngine,
    PydanticSchemaEngine,
    get_engine,
    set_engine,
    validate_section,
)
from reqguard.tier1_runtime.respond import BufferedResponse, ResponseSink, rejection_payload
from reqguard.tier1_runtime.processor import (
    RequestProcessor,
    RequestView,
    process_request,
    validate_request,
    process_request_body,
    validate_request_body,
    process_request_query,
    validate_request_query,
    process_request_params,
    validate_request_params,
)
from reqguard.tier1_runtime.middleware import ValidationASGIMiddleware, ValidationWSGIMiddleware

__version__ = "0.1.0"
__all__ = [
    # logging
    "get_logger",
    # errors
    "ReqGuardError", "RequestValidationError", "ConfigurationError",
    # config
    "get_config", "ReqGuardConfig",
    # sections
    "Section", "Mode", "SECTION_ORDER",
    # validate
    "Success", "Failure", "SchemaEngine", "PydanticSchemaEngine",
    "get_engine", "set_engine", "validate_section",
    # respond
    "BufferedResponse", "ResponseSink", "rejection_payload",
    # processor
    "RequestProcessor", "RequestView",
    "process_request", "validate_request",
    "process_request_body", "validate_request_body",
    "process_request_query", "validate_request_query",
    "process_request_params", "validate_request_params",
    # middleware
    "ValidationASGIMiddleware", "ValidationWSGIMiddleware",
]
