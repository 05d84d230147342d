"""Router — route table, global middleware, and request dispatch.

Mutable during setup (routes, middleware), frozen when it starts
serving. The router is itself the ASGI application::

    router = Router(RouterConfig(enable_logging=True))
    router.use(cors)

    home = router.route("/")
    home.send_static("public")

    router.route("/post/:id").get(show_post)

    router.listen(3000)

Every request goes through the global middleware first, then exactly
one of: static file, static index, first matching route, 404.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import anyio

from switchyard._internal.asgi import Receive, Scope, Send
from switchyard.config import RouterConfig
from switchyard.errors import DuplicateRoute, RequestTimeout
from switchyard.http.request import Request
from switchyard.http.response import ResponseWriter
from switchyard.middleware.chain import Link
from switchyard.routing.route import Route
from switchyard.server.handler import handle_request
from switchyard.server.static import serve_file, serve_not_found

logger = logging.getLogger("switchyard.server")


class Router:
    """The route table and dispatcher.

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock +
        double-check so exactly one caller snapshots the table, even if
        several workers deliver their first request at once.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_routes",
        "_routes_list",
        "_scan_tasks",
        "_scans_started",
        "config",
    )

    def __init__(self, config: RouterConfig | None = None, **options: Any) -> None:
        base = config or RouterConfig()
        self.config: RouterConfig = base.merged(**options)
        self._routes_list: list[Route] = []
        self._middleware_list: list[Link] = []
        self._frozen = False
        self._freeze_lock = threading.Lock()
        self._scans_started = False
        self._scan_tasks: set[asyncio.Task[None]] = set()

        # Snapshots — set by freeze()
        self._routes: tuple[Route, ...] = ()
        self._middleware: tuple[Link, ...] = ()

    # -- Setup --

    def use(self, middleware: Callable[..., Any]) -> Callable[..., Any]:
        """Add global middleware, run for every request before routing.

        Returns *middleware* unchanged, so it also works as a decorator.
        Raises ``InvalidHandler`` if it isn't callable.
        """
        self._check_not_frozen()
        self._middleware_list.append(Link.wrap(middleware))
        return middleware

    def route(
        self,
        path: str,
        options: RouterConfig | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> Route:
        """Register and return a new route for *path*.

        The route inherits this router's config. Pass *options* (a full
        ``RouterConfig`` or a mapping of overrides) and/or keyword
        *overrides* to change it for this route only.

        Raises:
            DuplicateRoute: If *path* is already registered.
            ConfigurationError: For an empty path or unknown options.
        """
        self._check_not_frozen()
        if any(route.path == path for route in self._routes_list):
            raise DuplicateRoute(path)

        if isinstance(options, RouterConfig):
            route_config = options.merged(**overrides)
        else:
            route_config = self.config.merged(**{**(options or {}), **overrides})

        route = Route(path, route_config)
        self._routes_list.append(route)
        return route

    @property
    def routes(self) -> tuple[Route, ...]:
        """All routes, in registration order."""
        return self._routes if self._frozen else tuple(self._routes_list)

    @property
    def middleware(self) -> tuple[Link, ...]:
        return self._middleware if self._frozen else tuple(self._middleware_list)

    # -- Lifecycle --

    def freeze(self) -> None:
        """Snapshot routes and middleware; further setup calls raise.

        Called automatically on lifespan startup or the first request.
        """
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            for route in self._routes_list:
                route.freeze()
            self._routes = tuple(self._routes_list)
            self._middleware = tuple(self._middleware_list)
            self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the router after it has started serving requests. "
                "Register routes and middleware before calling listen()."
            )
            raise RuntimeError(msg)

    def start_static_scans(self) -> None:
        """Scan every static directory in the background (once).

        Requests served before a scan finishes fall through to dynamic
        routes or the 404 responder.
        """
        if self._scans_started:
            return
        self._scans_started = True
        for route in self.routes:
            if route.static_dir is None:
                continue
            task = asyncio.get_running_loop().create_task(route.scan_static())
            self._scan_tasks.add(task)
            task.add_done_callback(self._scan_tasks.discard)

    async def scan_static(self) -> None:
        """Scan every static directory now and wait for completion."""
        self._scans_started = True
        for route in self.routes:
            await route.scan_static()

    # -- Dispatch --

    async def dispatch(self, request: Request, response: ResponseWriter) -> None:
        """Route one request that has passed the global middleware.

        Resolution order, each step exclusive of the next:

        1. GET and some route's static mapping has the exact path
        2. GET and some route's own path is the request path and it
           has that route's index file
        3. The first route, in registration order, whose pattern matches
           the raw (still percent-encoded) path
        4. The 404 responder
        """
        path = request.path
        routes = self.routes

        if request.method == "GET":
            for route in routes:
                file_path = route.static_file(path)
                if file_path is not None:
                    await self._claim(route, request, response, serve_file(response, file_path))
                    return
            for route in routes:
                file_path = route.index_file(path)
                if file_path is not None:
                    await self._claim(route, request, response, serve_file(response, file_path))
                    return

        # Patterns see the undecoded path so an encoded "/" stays in its segment
        raw_path = request.raw_path.decode("latin-1")
        for route in routes:
            params = route.pattern.match(raw_path)
            if params is not None:
                request.params = params
                await self._claim(route, request, response, route.handle_request(request, response))
                return

        await serve_not_found(response)

    async def _claim(
        self,
        route: Route,
        request: Request,
        response: ResponseWriter,
        work: Awaitable[None],
    ) -> None:
        """Run *work* for *route* with that route's 404 page and timeout.

        The route timeout starts at dispatch; the router timeout, if any,
        still bounds the whole request.
        """
        request.route = route
        response.not_found_page = route.options.custom_404_path
        with anyio.move_on_after(route.options.timeout_seconds) as deadline:
            await work
        if deadline.cancelled_caught:
            raise RequestTimeout()

    # -- Server --

    def listen(
        self,
        port: int | None = None,
        callback: Callable[[], Any] | None = None,
        *,
        host: str | None = None,
    ) -> None:
        """Freeze the router and serve it with pounce (blocking).

        *callback* runs once the router is frozen, just before the server
        starts accepting connections.
        """
        from switchyard.server.run import run_server

        self.freeze()
        run_server(
            self,
            host=host or self.config.host,
            port=port or self.config.port,
            log_level=self.config.log_level,
            on_ready=callback,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if scope["type"] != "http":
            return

        self.freeze()
        self.start_static_scans()

        await handle_request(
            scope,
            receive,
            send,
            dispatch=self.dispatch,
            middleware=self._middleware,
            config=self.config,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Freeze at startup and launch static scans; cancel pending scans at shutdown."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self.freeze()
                    self.start_static_scans()
                except Exception as exc:
                    logger.exception("Router startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                for task in list(self._scan_tasks):
                    task.cancel()
                await send({"type": "lifespan.shutdown.complete"})
                return
