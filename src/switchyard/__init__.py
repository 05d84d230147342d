"""Switchyard — a small ASGI request router with middleware chains.

Routes are path patterns with ``:name`` parameters. Each request flows
through global middleware, then route middleware, then the handlers
registered for its method. Static directories are scanned once at
startup and served ahead of dynamic routes.

Basic usage::

    from switchyard import Router

    router = Router()

    async def show_post(request, response):
        await response.json({"id": request.params["id"]})

    router.route("/post/:id").get(show_post)

    router.listen(3000)

Serving needs ``pip install switchyard[server]`` (pounce). The router
is a plain ASGI callable, so any ASGI server works too.
"""

__version__ = "0.1.0"
__all__ = [
    "BadRequest",
    "ConfigurationError",
    "DuplicateParameterName",
    "DuplicateRoute",
    "HTTPError",
    "InvalidHandler",
    "MatchError",
    "MethodAlreadyDefined",
    "Middleware",
    "Next",
    "NotFound",
    "PayloadTooLarge",
    "Request",
    "ResponseWriter",
    "Route",
    "Router",
    "RouterConfig",
    "SwitchyardError",
    "match",
]

_ERRORS = frozenset(
    {
        "BadRequest",
        "ConfigurationError",
        "DuplicateParameterName",
        "DuplicateRoute",
        "HTTPError",
        "InvalidHandler",
        "MatchError",
        "MethodAlreadyDefined",
        "NotFound",
        "PayloadTooLarge",
        "SwitchyardError",
    }
)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import switchyard`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from switchyard.routing.router import Router

        return Router

    if name == "Route":
        from switchyard.routing.route import Route

        return Route

    if name == "RouterConfig":
        from switchyard.config import RouterConfig

        return RouterConfig

    if name == "Request":
        from switchyard.http.request import Request

        return Request

    if name == "ResponseWriter":
        from switchyard.http.response import ResponseWriter

        return ResponseWriter

    if name in ("Middleware", "Next"):
        from switchyard.middleware import protocol

        return getattr(protocol, name)

    if name == "match":
        from switchyard.routing.pattern import match

        return match

    if name in _ERRORS:
        from switchyard import errors

        return getattr(errors, name)

    msg = f"module 'switchyard' has no attribute {name!r}"
    raise AttributeError(msg)
