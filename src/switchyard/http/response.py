"""Response sink handed to middleware and handlers.

Unlike a returned response object, the writer is mutable and talks to
the ASGI ``send`` channel directly: ``status()`` and the header setters
are chainable, and the terminal helpers (``json``, ``send``,
``send_bytes``, ``send_file``) start and finish the response::

    async def show(request, response):
        await response.status(200).json({"id": request.params["id"]})

A finished writer ignores further output (with a warning) so a chain
that both responds and continues can't emit two responses.
"""

from __future__ import annotations

import json as json_module
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from switchyard._internal.asgi import Send

logger = logging.getLogger("switchyard.server")


def body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


class ResponseWriter:
    """Mutable HTTP response bound to one request's ASGI ``send``."""

    __slots__ = (
        "_headers",
        "_send",
        "finished",
        "not_found_page",
        "started",
        "status_code",
    )

    def __init__(self, send: Send, *, not_found_page: str | Path | None = None) -> None:
        self._send = send
        self._headers: list[tuple[str, str]] = []
        self.status_code = 200
        self.started = False
        self.finished = False
        # Custom 404 page used by send_file() and the not-found responder
        self.not_found_page = not_found_page

    # -- Status and headers (chainable) --

    def status(self, code: int) -> ResponseWriter:
        """Set the status code. Returns ``self`` for chaining."""
        if self.started:
            logger.warning("Ignoring status(%d): response already started", code)
            return self
        self.status_code = code
        return self

    def set_header(self, name: str, value: str) -> ResponseWriter:
        """Set a header, replacing any existing value for *name*."""
        self.remove_header(name)
        self._headers.append((name, str(value)))
        return self

    def append_header(self, name: str, value: str) -> ResponseWriter:
        """Add a header without replacing existing values (e.g. ``Set-Cookie``)."""
        self._headers.append((name, str(value)))
        return self

    def set_headers(self, headers: Mapping[str, str]) -> ResponseWriter:
        """Set several headers at once."""
        for name, value in headers.items():
            self.set_header(name, value)
        return self

    def remove_header(self, name: str) -> ResponseWriter:
        lowered = name.lower()
        self._headers = [(k, v) for k, v in self._headers if k.lower() != lowered]
        return self

    def get_header(self, name: str) -> str | None:
        """Return the last value set for *name*, or ``None``."""
        lowered = name.lower()
        for key, value in reversed(self._headers):
            if key.lower() == lowered:
                return value
        return None

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._headers)

    @property
    def sent(self) -> bool:
        """True once anything has gone out on the wire."""
        return self.started

    # -- Low-level streaming --

    async def start(self, *, content_length: int | None = None) -> None:
        """Send the status line and headers."""
        if self.started:
            return
        if content_length is not None:
            self.set_header("Content-Length", str(content_length))
        raw_headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in self._headers
        ]
        self.started = True
        await self._send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": raw_headers,
            }
        )

    async def write(self, chunk: bytes) -> None:
        """Send a body chunk, starting the response if needed."""
        if self.finished:
            return
        await self.start()
        if chunk and body_allowed(self.status_code):
            await self._send({"type": "http.response.body", "body": chunk, "more_body": True})

    async def end(self, body: bytes = b"") -> None:
        """Finish the response with an optional final chunk."""
        if self.finished:
            logger.warning("Ignoring output: response already finished")
            return
        if not body_allowed(self.status_code):
            body = b""
        if not self.started:
            await self.start(content_length=len(body))
        self.finished = True
        await self._send({"type": "http.response.body", "body": body, "more_body": False})

    def abort(self) -> None:
        """Stop output without completing the body.

        No final body message is sent, so the server closes the
        connection instead of treating a short body as complete.
        """
        if not self.finished:
            logger.warning("Response aborted after start; body incomplete")
        self.finished = True

    # -- Terminal helpers --

    async def json(self, data: Any) -> None:
        """Serialize *data* as JSON and finish the response."""
        payload = json_module.dumps(data).encode("utf-8")
        await self.send_bytes(payload, content_type="application/json")

    async def send(self, text: str | bytes) -> None:
        """Send text and finish the response.

        Defaults to ``text/plain; charset=utf-8`` unless a Content-Type
        header was already set.
        """
        payload = text.encode("utf-8") if isinstance(text, str) else text
        content_type = None
        if self.get_header("content-type") is None:
            content_type = "text/plain; charset=utf-8"
        await self.send_bytes(payload, content_type=content_type)

    async def send_bytes(self, data: bytes, *, content_type: str | None = None) -> None:
        """Send raw bytes and finish the response."""
        if self.finished:
            logger.warning("Ignoring output: response already finished")
            return
        if content_type is not None and not self.started:
            self.set_header("Content-Type", content_type)
        await self.end(data)

    async def send_file(self, path: str | Path) -> None:
        """Stream a file from disk and finish the response.

        Content type comes from the file extension. A missing file or a
        directory produces the 404 responder; other I/O errors a 500.
        """
        from switchyard.server.static import serve_file

        await serve_file(self, path)
