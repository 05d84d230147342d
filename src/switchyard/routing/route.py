"""Route — one path pattern with its handlers, middleware, and static files.

Routes are created by ``Router.route()`` and configured with chainable
calls during setup::

    posts = router.route("/api/posts")
    posts.use(authenticate)
    posts.get(list_posts).post(validate_post, create_post)

Once the router freezes, a route's handler table and middleware are
read-only.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from switchyard._internal.types import HTTP_METHODS, Handler
from switchyard.config import RouterConfig
from switchyard.errors import ConfigurationError, HTTPError, MethodAlreadyDefined
from switchyard.http.body import load_body
from switchyard.http.request import Request
from switchyard.http.response import ResponseWriter
from switchyard.middleware.chain import Link, run_chain, wrap_all
from switchyard.routing.pattern import RoutePattern
from switchyard.server.errors import respond_with_error
from switchyard.server.static import scan_directory, serve_not_found, static_url

logger = logging.getLogger("switchyard.server")


class Route:
    """A registered path pattern and everything attached to it.

    Attributes:
        path: The pattern as registered, e.g. ``"/post/:id/custom"``.
        pattern: The pre-split ``RoutePattern``.
        options: This route's ``RouterConfig`` (the router's unless
            overridden at creation or by ``send_static``).
        static_dir: Directory registered with ``send_static``, if any.
    """

    __slots__ = (
        "_frozen",
        "_handlers",
        "_middleware",
        "_static_routes",
        "options",
        "path",
        "pattern",
        "static_dir",
    )

    def __init__(self, path: str, options: RouterConfig | None = None) -> None:
        if not isinstance(path, str) or not path:
            msg = f"Provide a valid route path, got {path!r}"
            raise ConfigurationError(msg)
        self.path = path
        self.pattern = RoutePattern.parse(path)
        self.options = options or RouterConfig()
        self.static_dir: Path | None = None
        self._handlers: dict[str, tuple[Link, ...]] = {}
        self._middleware: list[Link] = []
        self._static_routes: Mapping[str, Path] = MappingProxyType({})
        self._frozen = False

    def __repr__(self) -> str:
        methods = ",".join(self._handlers) or "-"
        return f"Route({self.path!r}, methods={methods})"

    # -- Handler registration --

    def register_handler(self, method: str, *handlers: Handler) -> Route:
        """Register the handler list for *method*.

        All but the last handler act as method-local middleware; the last
        is the terminal handler.

        Raises:
            MethodAlreadyDefined: If *method* already has handlers.
            InvalidHandler: If any handler is not callable.
            ConfigurationError: For an unsupported method or no handlers.
        """
        self._check_not_frozen()
        method = method.upper()
        if method not in HTTP_METHODS:
            msg = f"Unsupported method {method!r}; expected one of {', '.join(HTTP_METHODS)}"
            raise ConfigurationError(msg)
        if method in self._handlers:
            raise MethodAlreadyDefined(method, self.path)
        if not handlers:
            msg = f"{method} {self.path!r} needs at least one handler"
            raise ConfigurationError(msg)
        self._handlers[method] = wrap_all(handlers)
        return self

    def get(self, *handlers: Handler) -> Route:
        return self.register_handler("GET", *handlers)

    def post(self, *handlers: Handler) -> Route:
        return self.register_handler("POST", *handlers)

    def put(self, *handlers: Handler) -> Route:
        return self.register_handler("PUT", *handlers)

    def delete(self, *handlers: Handler) -> Route:
        return self.register_handler("DELETE", *handlers)

    def use(self, *middleware: Handler) -> Route:
        """Append route-local middleware, run before every method's handlers."""
        self._check_not_frozen()
        self._middleware.extend(wrap_all(middleware))
        return self

    # -- Static files --

    def send_static(self, directory: str | Path, **options: Any) -> Route:
        """Serve every file under *directory* beneath this route's path.

        The directory is scanned once, asynchronously, when the router
        starts (see ``scan_static``). Keyword *options* override this
        route's config, e.g. ``index="home.html"``.
        """
        self._check_not_frozen()
        if not isinstance(directory, (str, Path)) or not str(directory):
            msg = f"Provide a valid static directory path, got {directory!r}"
            raise ConfigurationError(msg)
        self.options = self.options.merged(**options)
        self.static_dir = Path(directory)
        return self

    async def scan_static(self) -> None:
        """Walk ``static_dir`` and publish the URL -> file mapping.

        Requests that arrive before this completes simply don't see the
        files yet.
        """
        if self.static_dir is None:
            return
        found = await scan_directory(self.static_dir, self.path)
        self._static_routes = MappingProxyType(found)
        logger.debug("Route %s: %d static files from %s", self.path, len(found), self.static_dir)

    @property
    def static_routes(self) -> Mapping[str, Path]:
        """Read-only URL path -> file path mapping."""
        return self._static_routes

    def static_file(self, url_path: str) -> Path | None:
        """The file registered for exactly *url_path*, if any."""
        return self._static_routes.get(url_path)

    def index_file(self, url_path: str) -> Path | None:
        """The index file to serve when *url_path* is this route's own path."""
        if url_path != self.path:
            return None
        return self._static_routes.get(static_url(self.path, self.options.index))

    # -- Introspection --

    @property
    def methods(self) -> frozenset[str]:
        return frozenset(self._handlers)

    @property
    def middleware(self) -> tuple[Link, ...]:
        return tuple(self._middleware)

    def handlers_for(self, method: str) -> tuple[Link, ...] | None:
        return self._handlers.get(method.upper())

    # -- Lifecycle --

    def freeze(self) -> None:
        """Make the handler table and middleware read-only."""
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                f"Cannot modify route {self.path!r} after the router has started "
                "serving requests. Register handlers, middleware, and static "
                "directories during setup."
            )
            raise RuntimeError(msg)

    # -- Request handling --

    async def handle_request(self, request: Request, response: ResponseWriter) -> None:
        """Read the body, apply default headers, and run the chain.

        Called by the router after a pattern match, with
        ``request.params`` already bound. A missing method handler gets
        the 404 responder; body errors get their status response and
        the chain never runs.
        """
        handlers = self._handlers.get(request.method)
        if handlers is None:
            await serve_not_found(response)
            return

        try:
            await load_body(request, self.options.body_size_limit)
        except HTTPError as exc:
            await respond_with_error(response, exc, request)
            return

        if self.options.default_headers:
            response.set_headers(self.options.default_headers)

        await run_chain((*self._middleware, *handlers), request, response)
