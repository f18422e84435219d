"""
reqguard.tier1_runtime.middleware
──────────────────────────────────
Framework-agnostic middleware that puts a ``RequestProcessor`` in front of
an ASGI or WSGI application. No web framework is required.

Supports: FastAPI / Starlette (ASGI), Flask / Django (WSGI).

Where each section comes from:

    section  ASGI                    WSGI
    params   scope["path_params"]    environ["wsgiorg.routing_args"][1]
    query    scope["query_string"]   environ["QUERY_STRING"]
    body     receive() messages      environ["wsgi.input"]

Path params are only populated once a router has matched the request, so
params validation belongs around route-level apps.
"""
from __future__ import annotations

import io
import json
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from reqguard.tier0_core.errors import RequestValidationError
from reqguard.tier0_core.http import JSON_CONTENT_TYPE, status_line
from reqguard.tier0_core.logging import bound_context
from reqguard.tier1_runtime.processor import RequestProcessor
from reqguard.tier1_runtime.respond import BufferedResponse
from reqguard.tier1_runtime.sections import Section
from reqguard.tier1_runtime.serialize import (
    decode_body,
    encode_body,
    encode_query,
    parse_query,
    serialize,
)
from reqguard.tier1_runtime.validate import Failure


def _malformed_body(exc: PydanticValidationError) -> RequestValidationError:
    return RequestValidationError(
        [Failure(Section.BODY, json.loads(exc.json(include_url=False)))]
    )


# ── ASGI middleware ────────────────────────────────────────────────────────

class _ASGIRequestView:
    """RequestView over an ASGI scope. The body is buffered and replayed."""

    def __init__(self, scope: dict, receive: Any) -> None:
        self.scope = dict(scope)
        self._receive = receive
        self._body = b""
        self._replay = False

    async def read_body(self) -> None:
        chunks: list[bytes] = []
        while True:
            message = await self._receive()
            if message["type"] != "http.request":
                break
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break
        self._body = b"".join(chunks)
        self._replay = True

    async def receive(self) -> dict:
        if self._replay:
            self._replay = False
            return {"type": "http.request", "body": self._body, "more_body": False}
        return await self._receive()

    def _header(self, name: bytes) -> str | None:
        for key, value in self.scope.get("headers", []):
            if key.lower() == name:
                return value.decode("latin-1")
        return None

    def _set_header(self, name: bytes, value: bytes) -> None:
        headers = [
            (k, v) for k, v in self.scope.get("headers", []) if k.lower() != name
        ]
        headers.append((name, value))
        self.scope["headers"] = headers

    def get_section(self, section: Section) -> Any:
        if section is Section.PARAMS:
            return self.scope.get("path_params")
        if section is Section.QUERY:
            return parse_query(self.scope.get("query_string", b""))
        try:
            return decode_body(self._body, self._header(b"content-type"))
        except PydanticValidationError as exc:
            raise _malformed_body(exc) from exc

    def set_section(self, section: Section, data: Any) -> None:
        if section is Section.PARAMS:
            self.scope["path_params"] = data
        elif section is Section.QUERY:
            self.scope["query_string"] = encode_query(data).encode("ascii")
        else:
            self._body = encode_body(data, self._header(b"content-type"))
            self._set_header(b"content-length", str(len(self._body)).encode("ascii"))


async def _send_json(send: Any, status_code: int, payload: Any) -> None:
    body = serialize(payload)
    await send({
        "type": "http.response.start",
        "status": status_code,
        "headers": [
            (b"content-type", JSON_CONTENT_TYPE.encode("ascii")),
            (b"content-length", str(len(body)).encode("ascii")),
        ],
    })
    await send({"type": "http.response.body", "body": body})


class ValidationASGIMiddleware:
    """
    ASGI middleware that validates each HTTP request before the wrapped app
    sees it.

    Usage (Starlette route-level, so path params are available)::

        from reqguard import ValidationASGIMiddleware, process_request

        guard = process_request({"params": ItemPath, "body": ItemIn})
        Route("/items/{item_id}", ValidationASGIMiddleware(endpoint_app, guard))
    """

    def __init__(self, app: Any, processor: RequestProcessor) -> None:
        self.app = app
        self.processor = processor

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        view = _ASGIRequestView(scope, receive)
        if Section.BODY in self.processor.sections:
            await view.read_body()

        response = BufferedResponse()

        async def call_next() -> None:
            await self.app(view.scope, view.receive, send)

        with bound_context(path=scope.get("path", ""), method=scope.get("method", "")):
            await self.processor(view, response, call_next)

        if response.sent:
            await _send_json(send, response.status_code, response.payload)


# ── WSGI middleware ────────────────────────────────────────────────────────

class _WSGIRequestView:
    """RequestView over a WSGI environ. ``wsgi.input`` is always rewound."""

    def __init__(self, environ: dict) -> None:
        self.environ = environ
        self._body = b""

    def read_body(self) -> None:
        try:
            length = int(self.environ.get("CONTENT_LENGTH") or 0)
        except ValueError:
            length = 0
        stream = self.environ.get("wsgi.input")
        self._body = stream.read(length) if stream is not None and length > 0 else b""
        self.environ["wsgi.input"] = io.BytesIO(self._body)

    def get_section(self, section: Section) -> Any:
        if section is Section.PARAMS:
            _, kwargs = self.environ.get("wsgiorg.routing_args", ((), {}))
            return kwargs
        if section is Section.QUERY:
            return parse_query(self.environ.get("QUERY_STRING", ""))
        try:
            return decode_body(self._body, self.environ.get("CONTENT_TYPE"))
        except PydanticValidationError as exc:
            raise _malformed_body(exc) from exc

    def set_section(self, section: Section, data: Any) -> None:
        if section is Section.PARAMS:
            args, _ = self.environ.get("wsgiorg.routing_args", ((), {}))
            self.environ["wsgiorg.routing_args"] = (args, data)
        elif section is Section.QUERY:
            self.environ["QUERY_STRING"] = encode_query(data)
        else:
            self._body = encode_body(data, self.environ.get("CONTENT_TYPE"))
            self.environ["wsgi.input"] = io.BytesIO(self._body)
            self.environ["CONTENT_LENGTH"] = str(len(self._body))


class ValidationWSGIMiddleware:
    """
    WSGI middleware that validates each request before the wrapped app
    sees it.

    Usage (Flask)::

        from reqguard import ValidationWSGIMiddleware, validate_request_query

        app.wsgi_app = ValidationWSGIMiddleware(
            app.wsgi_app, validate_request_query(SearchQuery)
        )
    """

    def __init__(self, app: Callable, processor: RequestProcessor) -> None:
        self.app = app
        self.processor = processor

    def __call__(self, environ: dict, start_response: Callable) -> Any:
        view = _WSGIRequestView(environ)
        if Section.BODY in self.processor.sections:
            view.read_body()

        response = BufferedResponse()
        with bound_context(
            path=environ.get("PATH_INFO", ""),
            method=environ.get("REQUEST_METHOD", ""),
        ):
            result = self.processor.handle_sync(
                view, response, lambda: self.app(environ, start_response)
            )

        if response.sent:
            body = serialize(response.payload)
            start_response(
                status_line(response.status_code),
                [
                    ("Content-Type", JSON_CONTENT_TYPE),
                    ("Content-Length", str(len(body))),
                ],
            )
            return [body]
        return result


__all__ = ["ValidationASGIMiddleware", "ValidationWSGIMiddleware"]
