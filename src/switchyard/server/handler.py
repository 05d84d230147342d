"""ASGI request pipeline — the only place a request's lifetime is managed.

Builds the Request and ResponseWriter from the ASGI scope, runs the
global middleware chain with routing as its terminal step, enforces
the request timeout, converts anything that escapes into an error
response, and writes the access log line.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeAlias

import anyio

from switchyard._internal.asgi import Receive, Scope, Send
from switchyard.config import RouterConfig
from switchyard.errors import InternalError, RequestTimeout
from switchyard.http.request import Request
from switchyard.http.response import ResponseWriter
from switchyard.middleware.chain import Link, run_chain
from switchyard.server.errors import respond_with_error

logger = logging.getLogger("switchyard.server")
access_logger = logging.getLogger("switchyard.access")

Dispatch: TypeAlias = Callable[[Request, ResponseWriter], Awaitable[None]]


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatch: Dispatch,
    middleware: tuple[Link, ...],
    config: RouterConfig,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    started = time.perf_counter()
    request = Request.from_asgi(scope, receive)
    response = ResponseWriter(send, not_found_page=config.custom_404_path)
    if config.default_headers:
        response.set_headers(config.default_headers)

    try:
        with anyio.move_on_after(config.timeout_seconds) as deadline:
            await run_chain(middleware, request, response, terminal=dispatch)
        if deadline.cancelled_caught:
            raise RequestTimeout()
    except RequestTimeout as exc:
        logger.warning("%s %s exceeded its request timeout", request.method, request.path)
        await respond_with_error(response, exc, request)
    except Exception as exc:
        await respond_with_error(response, exc, request)
    else:
        if not response.finished:
            logger.warning(
                "No response written for %s %s; the chain ended without output",
                request.method,
                request.path,
            )
            await respond_with_error(response, InternalError(), request)
    finally:
        options = request.route.options if request.route is not None else config
        if options.enable_logging:
            elapsed = time.perf_counter() - started
            access_logger.info(
                "%s %s %d %.3fs",
                request.method,
                request.url,
                response.status_code,
                elapsed,
            )
