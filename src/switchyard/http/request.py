"""Per-request context.

Metadata is fixed at arrival. The body fields (``raw_body``, ``body``,
``file``, ``form``) are filled in by the body reader once a route has
matched, before route middleware runs. ``state`` is free for
application middleware (e.g. an authenticated user id).
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from switchyard._internal.asgi import Receive, Scope
from switchyard.http.headers import Headers, media_type
from switchyard.http.query import QueryParams

if TYPE_CHECKING:
    from switchyard.http.body import BodyStream
    from switchyard.http.forms import FormData
    from switchyard.routing.route import Route


@dataclass(slots=True)
class Request:
    """An inbound HTTP request and everything the pipeline learns about it."""

    method: str
    path: str
    headers: Headers
    query: QueryParams
    raw_path: bytes = b""
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None
    params: dict[str, str] = field(default_factory=dict)

    # The route that claimed this request, set by the dispatcher
    route: Route | None = None

    # Filled by the body reader
    raw_body: bytes | None = None
    body: Any = None
    file: BodyStream | None = None
    form: FormData | None = None

    # Application-owned per-request data
    state: dict[str, Any] = field(default_factory=dict)

    # Private: ASGI receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def media_type(self) -> str | None:
        """The lowercased media type, without parameters."""
        return media_type(self.content_type)

    @property
    def content_length(self) -> int | None:
        """The Content-Length header as int."""
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def url(self) -> str:
        """Request path plus query string."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs.decode('latin-1')}"
        return self.path

    # -- Body streaming --

    async def stream(self) -> AsyncGenerator[bytes]:
        """Yield body chunks as they arrive from the server.

        The ASGI receive channel can only be consumed once; the body
        reader normally does that. Raises ``ConnectionError`` if the
        client disconnects mid-body.
        """
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                msg = "Client disconnected before the request body completed"
                raise ConnectionError(msg)
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            raw_path=scope.get("raw_path") or scope["path"].encode("latin-1"),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )
