"""Request body accumulation, size enforcement, and classification.

``read_body`` drains the ASGI receive channel chunk by chunk and stops
the moment the running total passes the limit. ``classify`` then decides
what handlers see, by media type:

- ``application/json`` -> ``request.body`` is the parsed value
  (an empty body is ``{}``)
- ``multipart/form-data`` -> ``request.form`` / ``request.body`` is a
  ``FormData`` of named parts
- anything else, or no Content-Type -> ``request.body`` is the raw bytes
  and ``request.file`` is a ``BodyStream`` over them
"""

import json
import logging
from collections.abc import AsyncIterator
from pathlib import Path

import anyio

from switchyard.errors import BadRequest, InternalError, PayloadTooLarge
from switchyard.http.forms import parse_multipart
from switchyard.http.request import Request

logger = logging.getLogger("switchyard.server")

JSON_MEDIA_TYPE = "application/json"
MULTIPART_MEDIA_TYPE = "multipart/form-data"


class BodyStream:
    """A readable, single-consumer stream over an uploaded body.

    Mirrors the small async file API handlers expect::

        async def upload(request, response):
            await request.file.save(uploads / "image.png")
            await response.status(201).json({"ok": True})
    """

    __slots__ = ("_data", "_position", "content_type")

    chunk_size = 64 * 1024

    def __init__(self, data: bytes, content_type: str | None = None) -> None:
        self._data = memoryview(data)
        self._position = 0
        self.content_type = content_type

    @property
    def size(self) -> int:
        return len(self._data)

    async def read(self, size: int = -1) -> bytes:
        """Read up to *size* bytes (everything remaining if negative)."""
        start = self._position
        end = len(self._data) if size < 0 else min(start + size, len(self._data))
        self._position = end
        return bytes(self._data[start:end])

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._chunks()

    async def _chunks(self) -> AsyncIterator[bytes]:
        while chunk := await self.read(self.chunk_size):
            yield chunk

    async def save(self, path: str | Path) -> int:
        """Write the remaining content to *path*; return bytes written."""
        written = 0
        async with await anyio.open_file(path, "wb") as fh:
            async for chunk in self:
                await fh.write(chunk)
                written += len(chunk)
        return written

    def __repr__(self) -> str:
        return f"BodyStream({self.size} bytes, content_type={self.content_type!r})"


async def read_body(request: Request, limit: int | None = None) -> bytes:
    """Accumulate the request body, enforcing *limit* bytes.

    Raises:
        PayloadTooLarge: As soon as the running total exceeds *limit*
            (or the declared Content-Length already does). No further
            chunks are read.
        InternalError: If the receive channel fails or the client
            disconnects before the body completes.
    """
    if limit is not None:
        declared = request.content_length
        if declared is not None and declared > limit:
            raise PayloadTooLarge()

    chunks: list[bytes] = []
    received = 0
    try:
        async for chunk in request.stream():
            received += len(chunk)
            if limit is not None and received > limit:
                logger.debug(
                    "Body for %s %s exceeded %d bytes; aborting read",
                    request.method,
                    request.path,
                    limit,
                )
                raise PayloadTooLarge()
            chunks.append(chunk)
    except OSError as exc:
        logger.error("Error reading body for %s %s: %s", request.method, request.path, exc)
        raise InternalError() from exc

    return b"".join(chunks)


def classify(request: Request, raw: bytes) -> None:
    """Attach *raw* to *request* according to its media type.

    Raises ``BadRequest`` when the body doesn't parse under its declared
    type; in that case nothing is attached.
    """
    kind = request.media_type

    if kind == JSON_MEDIA_TYPE:
        if not raw:
            parsed: object = {}
        else:
            try:
                parsed = json.loads(raw)
            except ValueError as exc:
                logger.debug("Invalid JSON body for %s %s: %s", request.method, request.path, exc)
                raise BadRequest() from exc
        request.raw_body = raw
        request.body = parsed
        return

    if kind == MULTIPART_MEDIA_TYPE:
        form = parse_multipart(raw, request.content_type or "")
        request.raw_body = raw
        request.form = form
        request.body = form
        return

    request.raw_body = raw
    request.body = raw
    request.file = BodyStream(raw, request.content_type)


async def load_body(request: Request, limit: int | None = None) -> None:
    """Read and classify the body in one step."""
    raw = await read_body(request, limit)
    classify(request, raw)
