"""Multipart form data — named, boundary-delimited parts.

``multipart/form-data`` bodies are split into ``FormPart`` objects with
``python-multipart``. ``FormData`` gives mapping access to the text
fields and exposes uploaded files through ``files``; the ordered
``parts`` tuple keeps every part as it arrived.

Parts are held in memory. Pair multipart routes with a
``body_size_limit`` when uploads can be large.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

import anyio
from python_multipart.multipart import MultipartParser, parse_options_header

from switchyard.errors import BadRequest


@dataclass(frozen=True, slots=True)
class FormPart:
    """One part of a multipart body.

    ``filename`` is ``None`` for plain text fields.
    """

    name: str
    data: bytes
    filename: str | None = None
    content_type: str = "text/plain"

    @property
    def is_file(self) -> bool:
        return self.filename is not None

    @property
    def text(self) -> str:
        return self.data.decode("utf-8", errors="replace")


@dataclass(frozen=True, slots=True)
class UploadFile:
    """An uploaded file from a multipart form submission."""

    filename: str
    content_type: str
    size: int
    _content: bytes

    async def read(self) -> bytes:
        """Return the file content as bytes."""
        return self._content

    async def save(self, path: str | Path) -> None:
        """Write the file content to *path* without blocking the loop.

        Parent directories must exist.
        """
        await anyio.Path(path).write_bytes(self._content)

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


class FormData(Mapping[str, str]):
    """Immutable parsed multipart form.

    ``__getitem__`` returns the first text value for a key,
    ``get_list`` all of them. ``files`` maps field names to the first
    ``UploadFile`` sent under that name.

    Usage::

        form = request.form
        title = form["title"]
        avatar = form.files.get("avatar")
    """

    __slots__ = ("_data", "_files", "_parts")

    def __init__(self, parts: tuple[FormPart, ...] = ()) -> None:
        data: dict[str, list[str]] = {}
        files: dict[str, UploadFile] = {}
        for part in parts:
            if part.is_file:
                files.setdefault(
                    part.name,
                    UploadFile(
                        filename=part.filename or "",
                        content_type=part.content_type,
                        size=len(part.data),
                        _content=part.data,
                    ),
                )
            else:
                data.setdefault(part.name, []).append(part.text)
        object.__setattr__(self, "_parts", parts)
        object.__setattr__(self, "_data", data)
        object.__setattr__(self, "_files", files)

    @property
    def parts(self) -> tuple[FormPart, ...]:
        """Every part, in body order."""
        return self._parts

    @property
    def files(self) -> Mapping[str, UploadFile]:
        """Uploaded files by field name."""
        return self._files

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"FormData({{{items}}}, files={sorted(self._files)!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all text values for *key*."""
        return list(self._data.get(key, []))


def parse_multipart(body: bytes, content_type: str) -> FormData:
    """Split a multipart body into named parts.

    Raises:
        BadRequest: If the boundary parameter is missing or the body
            is not valid multipart data.
    """
    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if not boundary:
        raise BadRequest("Multipart form data missing boundary parameter")

    parts: list[FormPart] = []

    headers: dict[str, str] = {}
    header_field = bytearray()
    header_value = bytearray()
    data = bytearray()

    def on_part_begin() -> None:
        headers.clear()
        data.clear()

    def on_header_field(chunk: bytes, start: int, end: int) -> None:
        header_field.extend(chunk[start:end])

    def on_header_value(chunk: bytes, start: int, end: int) -> None:
        header_value.extend(chunk[start:end])

    def on_header_end() -> None:
        headers[header_field.decode("latin-1").lower()] = header_value.decode("latin-1")
        header_field.clear()
        header_value.clear()

    def on_part_data(chunk: bytes, start: int, end: int) -> None:
        data.extend(chunk[start:end])

    def on_part_end() -> None:
        disposition = headers.get("content-disposition")
        if disposition is None:
            return
        _, params = parse_options_header(disposition.encode("latin-1"))
        name = params.get(b"name")
        if name is None:
            return
        filename = params.get(b"filename")
        parts.append(
            FormPart(
                name=name.decode("utf-8"),
                data=bytes(data),
                filename=filename.decode("utf-8") if filename is not None else None,
                content_type=headers.get(
                    "content-type",
                    "application/octet-stream" if filename is not None else "text/plain",
                ),
            )
        )

    callbacks = {
        "on_part_begin": on_part_begin,
        "on_header_field": on_header_field,
        "on_header_value": on_header_value,
        "on_header_end": on_header_end,
        "on_part_data": on_part_data,
        "on_part_end": on_part_end,
    }

    parser = MultipartParser(boundary, callbacks)
    try:
        parser.write(body)
        parser.finalize()
    except ValueError as exc:
        raise BadRequest("Malformed multipart body") from exc

    return FormData(tuple(parts))
