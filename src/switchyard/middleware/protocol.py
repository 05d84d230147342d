"""Middleware protocol and Next type.

A middleware or handler is any callable matching::

    async def my_mw(request: Request, response: ResponseWriter, next: Next) -> None: ...

No base class required. Plain ``def`` works too, and so do shorter
signatures — ``(request, response)`` for terminal handlers that never
continue, ``(request,)`` for observers.

``next()`` continues the chain. Awaiting it runs everything downstream
before returning, so code after ``await next()`` sees the finished
response::

    async def timing(request, response, next):
        start = time.monotonic()
        await next()
        elapsed = time.monotonic() - start
        logger.info("%s took %.3fs", request.path, elapsed)

A sync middleware can call ``next()`` without awaiting; the chain runs
the continuation once the middleware returns.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeAlias

from switchyard.http.request import Request
from switchyard.http.response import ResponseWriter

# The continuation handed to each link
Next: TypeAlias = Callable[[], Awaitable[None]]


class Middleware(Protocol):
    """Protocol for switchyard middleware and handlers.

    Accepts both functions and callable objects::

        # Function middleware
        def authenticate(request, response, next):
            ...

        # Class middleware
        class RequireJSON:
            async def __call__(self, request, response, next):
                ...
    """

    def __call__(self, request: Request, response: ResponseWriter, next: Next) -> Any: ...
