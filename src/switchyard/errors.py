"""Switchyard exception hierarchy.

Shared across Router, Route, body reading, and the request pipeline so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class SwitchyardError(Exception):
    """Base for all switchyard-specific errors."""


class ConfigurationError(SwitchyardError):
    """Raised when routes, handlers, or options are registered incorrectly.

    Always raised synchronously during setup. The failing call has no
    effect; routes registered before it are untouched.
    """


class DuplicateRoute(ConfigurationError):
    """A route with the same path pattern is already registered."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Route for path {path!r} is already defined")


class MethodAlreadyDefined(ConfigurationError):
    """A handler list for this method already exists on the route."""

    def __init__(self, method: str, path: str) -> None:
        self.method = method
        self.path = path
        super().__init__(f"{method} handler for path {path!r} is already defined")


class InvalidHandler(ConfigurationError):
    """A handler or middleware argument is not callable."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Handler must be callable, got {type(value).__name__}: {value!r}")


class MatchError(SwitchyardError):
    """A route pattern cannot be matched because it is malformed.

    Raised on the first match attempt, not at registration. The pipeline
    treats it as a server-side defect (500), never as a 404.
    """


class DuplicateParameterName(MatchError):
    """The same ``:name`` parameter appears twice in one pattern."""

    def __init__(self, name: str, pattern: str) -> None:
        self.name = name
        self.pattern = pattern
        super().__init__(
            f"Duplicate parameter {name!r} in route pattern {pattern!r}. "
            "Parameter names must be unique."
        )


@dataclass(eq=False)
class HTTPError(SwitchyardError):
    """An error that maps directly to an HTTP status code.

    The request pipeline catches these and writes the matching response.
    ``detail`` is what the client sees; keep internals out of it.

    Not frozen: context managers such as ``contextlib.contextmanager``
    reassign ``__traceback__`` on exceptions passing through them.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """400 — the body could not be parsed under its declared content type."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no static file or route matched, or the route lacks the method."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class PayloadTooLarge(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """413 — the request body exceeded the configured size limit."""

    def __init__(self, detail: str = "Payload Too Large") -> None:
        super().__init__(status=413, detail=detail)


class InternalError(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """500 — an I/O failure while reading the body or serving a file."""

    def __init__(self, detail: str = "Internal Server Error") -> None:
        super().__init__(status=500, detail=detail)


class RequestTimeout(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """503 — the request pipeline ran longer than the configured timeout."""

    def __init__(self, detail: str = "Service Unavailable") -> None:
        super().__init__(status=503, detail=detail)
