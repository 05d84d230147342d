"""Chain executor for middleware and handlers.

A chain is an ordered tuple of ``Link`` objects. ``run_chain`` walks it
with an index cursor, handing each link a one-shot ``next``
continuation. Nothing is entered twice: a second ``next()`` call is
ignored, and once the response has been sent no further link runs.
"""

import logging
from collections.abc import Awaitable, Callable, Generator, Iterable
from dataclasses import dataclass
from typing import Any

from switchyard._internal.invoke import invoke, positional_arity
from switchyard.errors import InvalidHandler
from switchyard.http.request import Request
from switchyard.http.response import ResponseWriter

logger = logging.getLogger("switchyard.server")


@dataclass(frozen=True, slots=True)
class Link:
    """A middleware or handler, ready to be invoked by the chain.

    ``arity`` is how many of ``(request, response, next)`` the callable
    takes, resolved once at registration.
    """

    func: Callable[..., Any]
    arity: int

    @classmethod
    def wrap(cls, func: Any) -> "Link":
        """Wrap *func*, raising ``InvalidHandler`` if it isn't callable."""
        if isinstance(func, Link):
            return func
        if not callable(func):
            raise InvalidHandler(func)
        return cls(func=func, arity=positional_arity(func, 3))

    @property
    def name(self) -> str:
        return getattr(self.func, "__qualname__", repr(self.func))

    async def __call__(
        self,
        request: Request,
        response: ResponseWriter,
        next: "Continuation",
    ) -> None:
        args = (request, response, next)[: self.arity]
        await invoke(self.func, *args)


def wrap_all(funcs: Iterable[Any]) -> tuple[Link, ...]:
    """Wrap every callable, failing on the first non-callable."""
    return tuple(Link.wrap(func) for func in funcs)


class Continuation:
    """The ``next`` callable given to one link.

    Calling it marks the continuation as requested and returns an
    awaitable; awaiting runs the rest of the chain. If a link calls
    ``next()`` without awaiting (plain ``def`` middleware), the chain
    runs the rest after that link returns.
    """

    __slots__ = ("_called", "_chain", "_index", "_ran")

    def __init__(self, chain: "_Chain", index: int) -> None:
        self._chain = chain
        self._index = index
        self._called = False
        self._ran = False

    def __call__(self) -> "Continuation":
        if self._called:
            logger.warning(
                "next() called more than once by %s; ignoring",
                self._chain.links[self._index - 1].name,
            )
        self._called = True
        return self

    def __await__(self) -> Generator[Any, None, None]:
        return self._run().__await__()

    async def _run(self) -> None:
        if self._ran:
            return
        self._ran = True
        await self._chain.dispatch(self._index)

    async def settle(self) -> None:
        """Run the continuation if it was requested but never awaited."""
        if self._called and not self._ran:
            await self._run()


class _Chain:
    __slots__ = ("links", "request", "response")

    def __init__(
        self,
        links: tuple[Link, ...],
        request: Request,
        response: ResponseWriter,
    ) -> None:
        self.links = links
        self.request = request
        self.response = response

    async def dispatch(self, index: int) -> None:
        if index >= len(self.links):
            return
        if self.response.finished:
            logger.debug(
                "Response already sent; skipping %s for %s %s",
                self.links[index].name,
                self.request.method,
                self.request.path,
            )
            return
        link = self.links[index]
        continuation = Continuation(self, index + 1)
        await link(self.request, self.response, continuation)
        await continuation.settle()


async def run_chain(
    links: tuple[Link, ...],
    request: Request,
    response: ResponseWriter,
    terminal: Callable[[Request, ResponseWriter], Awaitable[None]] | None = None,
) -> None:
    """Run *links* in order for one request.

    *terminal*, when given, runs as if it were one more link, after the
    last link calls ``next``. The router uses it to dispatch from inside
    the global middleware chain, so middleware code after ``await next()``
    runs once routing has finished.
    """
    if terminal is not None:
        links = (*links, Link(func=terminal, arity=2))
    await _Chain(links, request, response).dispatch(0)
