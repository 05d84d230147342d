"""Static asset discovery and file responses.

``scan_directory`` builds a route's URL -> file mapping with one
recursive walk. ``serve_file`` streams a file through a
``ResponseWriter`` in chunks; ``serve_not_found`` is the 404 responder
(custom page when configured, built-in text otherwise).

All filesystem access goes through ``anyio`` so a slow disk never
blocks the event loop.
"""

import logging
import stat as stat_module
from pathlib import Path

import anyio

from switchyard.http.mime import content_type_for
from switchyard.http.response import ResponseWriter

logger = logging.getLogger("switchyard.static")

CHUNK_SIZE = 64 * 1024
DEFAULT_NOT_FOUND_BODY = "404 - Not Found"


def static_url(base_path: str, relative: str) -> str:
    """Join a route base path and a POSIX relative file path into a URL path.

    ``("/", "css/site.css")`` -> ``"/css/site.css"``;
    ``("/docs", "index.html")`` -> ``"/docs/index.html"``.
    """
    return base_path.rstrip("/") + "/" + relative


async def scan_directory(root: str | Path, base_path: str) -> dict[str, Path]:
    """Map every regular file under *root* to its URL under *base_path*.

    Symlinks are not followed. An entry that can't be inspected is
    logged and skipped; the rest of the scan continues.
    """
    root_path = anyio.Path(root)
    found: dict[str, Path] = {}

    async def walk(current: anyio.Path) -> None:
        try:
            info = await current.lstat()
        except OSError:
            logger.exception("Error scanning static entry %s", current)
            return

        if stat_module.S_ISREG(info.st_mode):
            relative = Path(current).relative_to(Path(root_path)).as_posix()
            found[static_url(base_path, relative)] = Path(current)
        elif stat_module.S_ISDIR(info.st_mode):
            try:
                children = sorted([child async for child in current.iterdir()], key=str)
            except OSError:
                logger.exception("Error listing static directory %s", current)
                return
            for child in children:
                await walk(child)

    await walk(root_path)
    return found


async def _stream(response: ResponseWriter, path: str | Path) -> bool:
    """Stream *path* into *response*. Returns ``False`` if there's no such file.

    Raises ``OSError`` for any other failure before the response started.
    A read failure after that is logged and the response is aborted,
    leaving the server to drop the connection short of Content-Length.
    """
    file_path = anyio.Path(path)
    try:
        info = await file_path.stat()
    except (FileNotFoundError, NotADirectoryError):
        return False
    if stat_module.S_ISDIR(info.st_mode):
        return False

    async with await anyio.open_file(file_path, "rb") as fh:
        response.set_header("Content-Type", content_type_for(path))
        await response.start(content_length=info.st_size)
        sent = 0
        try:
            while chunk := await fh.read(CHUNK_SIZE):
                await response.write(chunk)
                sent += len(chunk)
        except OSError:
            logger.exception(
                "Error streaming static file %s; body truncated at %d of %d bytes",
                path,
                sent,
                info.st_size,
            )
            response.abort()
            return True
    await response.end()
    return True


async def serve_file(response: ResponseWriter, path: str | Path) -> None:
    """Send the file at *path*; 404 responder if missing, 500 on I/O errors."""
    try:
        if await _stream(response, path):
            return
    except OSError:
        logger.exception("Unexpected error serving static file %s", path)
        if not response.started:
            response.status(500).set_header("Content-Type", "text/plain; charset=utf-8")
            await response.end(b"Internal Server Error")
        return

    logger.debug("Static file %s not found", path)
    await serve_not_found(response)


async def serve_not_found(response: ResponseWriter) -> None:
    """Send a 404 using the writer's custom page, or the built-in body."""
    if response.started:
        await response.end()
        return

    response.status(404)
    page = response.not_found_page
    if page is not None:
        try:
            if await _stream(response, page):
                return
            logger.error("Custom 404 page %s does not exist", page)
        except OSError:
            logger.exception("Error serving custom 404 page %s", page)
            if response.started:
                return

    response.set_header("Content-Type", "text/plain; charset=utf-8")
    await response.end(DEFAULT_NOT_FOUND_BODY.encode("utf-8"))
