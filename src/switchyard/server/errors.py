"""Error responses for the request pipeline.

Maps ``HTTPError`` subclasses, pattern defects, and unexpected failures
to plain-text responses. Internal details go to the server log, never
into the response body.
"""

import logging

from switchyard.errors import HTTPError, MatchError, NotFound
from switchyard.http.request import Request
from switchyard.http.response import ResponseWriter
from switchyard.server.static import serve_not_found

logger = logging.getLogger("switchyard.server")

INTERNAL_ERROR_BODY = "Internal Server Error"


async def respond_with_error(
    response: ResponseWriter,
    exc: Exception,
    request: Request | None = None,
) -> None:
    """Write the response for *exc*, or close the response if it already started.

    - ``NotFound`` -> the 404 responder (custom page when configured)
    - other ``HTTPError`` -> its status and detail as plain text
    - ``MatchError`` and anything else -> a generic 500, logged with traceback
    """
    method = request.method if request is not None else "-"
    path = request.path if request is not None else "-"

    if isinstance(exc, HTTPError):
        logger.debug("%d %s %s — %s", exc.status, method, path, exc.detail)
        status = exc.status
        body = exc.detail or f"Error {exc.status}"
        headers = exc.headers
    elif isinstance(exc, MatchError):
        logger.error("500 %s %s — invalid route pattern", method, path, exc_info=exc)
        status, body, headers = 500, INTERNAL_ERROR_BODY, ()
    else:
        logger.error("500 %s %s", method, path, exc_info=exc)
        status, body, headers = 500, INTERNAL_ERROR_BODY, ()

    if response.started:
        # Too late to change the status; close what's open.
        if not response.finished:
            await response.end()
        return

    if isinstance(exc, NotFound):
        await serve_not_found(response)
        return

    response.status(status)
    for name, value in headers:
        response.set_header(name, value)
    await response.send(body)
