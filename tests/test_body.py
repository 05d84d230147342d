"""Tests for switchyard.http.body — size limits and content-type handling."""

import pytest

from switchyard.errors import BadRequest
from switchyard.http.body import BodyStream, classify
from switchyard.http.forms import FormData
from switchyard.http.headers import Headers
from switchyard.http.query import QueryParams
from switchyard.http.request import Request
from switchyard.routing.router import Router
from switchyard.testing import TestClient

BOUNDARY = "----switchyardboundary"


def _multipart(*parts: tuple[str, bytes, str | None, str | None]) -> bytes:
    lines: list[bytes] = []
    for name, data, filename, content_type in parts:
        disposition = f'form-data; name="{name}"'
        if filename is not None:
            disposition += f'; filename="{filename}"'
        lines.append(f"--{BOUNDARY}\r\n".encode())
        lines.append(f"Content-Disposition: {disposition}\r\n".encode())
        if content_type is not None:
            lines.append(f"Content-Type: {content_type}\r\n".encode())
        lines.append(b"\r\n" + data + b"\r\n")
    lines.append(f"--{BOUNDARY}--\r\n".encode())
    return b"".join(lines)


def _request(content_type: str | None = None) -> Request:
    headers = {"content-type": content_type} if content_type else {}
    return Request(
        method="POST",
        path="/",
        headers=Headers.from_dict(headers),
        query=QueryParams(),
    )


def _echo_router(**options) -> tuple[Router, list[Request]]:
    seen: list[Request] = []

    async def echo(request, response):
        seen.append(request)
        await response.send("ok")

    router = Router(**options)
    router.route("/upload").post(echo).put(echo)
    return router, seen


class TestSizeLimit:
    async def test_single_chunk_over_limit(self) -> None:
        router, seen = _echo_router(body_size_limit=10)
        async with TestClient(router) as client:
            response = await client.post("/upload", body=b"x" * 11)
        assert response.status == 413
        assert seen == []

    async def test_multi_chunk_over_limit(self) -> None:
        router, seen = _echo_router(body_size_limit=10)
        async with TestClient(router) as client:
            response = await client.post("/upload", chunks=[b"x" * 6, b"x" * 6, b"x" * 6])
        assert response.status == 413
        assert seen == []

    async def test_declared_length_over_limit(self) -> None:
        router, seen = _echo_router(body_size_limit=10)
        async with TestClient(router) as client:
            response = await client.post(
                "/upload", body=b"x", headers={"Content-Length": "1000"}
            )
        assert response.status == 413
        assert seen == []

    async def test_exactly_at_limit(self) -> None:
        router, seen = _echo_router(body_size_limit=10)
        async with TestClient(router) as client:
            response = await client.post("/upload", chunks=[b"x" * 5, b"x" * 5])
        assert response.status == 200
        assert seen[0].body == b"x" * 10

    async def test_no_limit(self) -> None:
        router, seen = _echo_router()
        async with TestClient(router) as client:
            response = await client.post("/upload", body=b"x" * 100_000)
        assert response.status == 200
        assert len(seen[0].raw_body) == 100_000

    async def test_route_limit_overrides_router(self) -> None:
        seen: list[Request] = []

        async def echo(request, response):
            seen.append(request)
            await response.send("ok")

        router = Router(body_size_limit=1000)
        router.route("/small", body_size_limit=2).post(echo)
        async with TestClient(router) as client:
            response = await client.post("/small", body=b"abc")
        assert response.status == 413
        assert seen == []


class TestJSON:
    async def test_parsed(self) -> None:
        router, seen = _echo_router()
        async with TestClient(router) as client:
            response = await client.post("/upload", json={"a": 1})
        assert response.status == 200
        assert seen[0].body == {"a": 1}
        assert seen[0].raw_body == b'{"a": 1}'

    async def test_content_type_parameters_ignored(self) -> None:
        router, seen = _echo_router()
        async with TestClient(router) as client:
            await client.put(
                "/upload",
                body=b"[1, 2]",
                headers={"Content-Type": "Application/JSON; charset=utf-8"},
            )
        assert seen[0].body == [1, 2]

    async def test_empty_body_is_empty_object(self) -> None:
        router, seen = _echo_router()
        async with TestClient(router) as client:
            response = await client.post(
                "/upload", body=b"", headers={"Content-Type": "application/json"}
            )
        assert response.status == 200
        assert seen[0].body == {}

    async def test_malformed_is_400(self) -> None:
        router, seen = _echo_router()
        async with TestClient(router) as client:
            response = await client.post(
                "/upload", body=b"{nope", headers={"Content-Type": "application/json"}
            )
        assert response.status == 400
        assert seen == []

    async def test_whitespace_only_is_400(self) -> None:
        router, _ = _echo_router()
        async with TestClient(router) as client:
            response = await client.post(
                "/upload", body=b"   ", headers={"Content-Type": "application/json"}
            )
        assert response.status == 400


class TestRawBody:
    async def test_file_stream_for_other_types(self, tmp_path) -> None:
        saved = tmp_path / "image.png"

        async def upload(request, response):
            written = await request.file.save(saved)
            await response.status(201).json({"written": written})

        router = Router()
        router.route("/upload").post(upload)
        async with TestClient(router) as client:
            response = await client.post(
                "/upload", body=b"\x89PNG data", headers={"Content-Type": "image/png"}
            )
        assert response.status == 201
        assert response.json() == {"written": 9}
        assert saved.read_bytes() == b"\x89PNG data"

    async def test_missing_content_type_is_raw(self) -> None:
        router, seen = _echo_router()
        async with TestClient(router) as client:
            await client.post("/upload", body=b"hello")
        assert seen[0].body == b"hello"
        assert seen[0].file is not None
        assert seen[0].file.content_type is None

    async def test_get_gets_empty_body(self) -> None:
        seen: list[Request] = []

        async def handler(request, response):
            seen.append(request)
            await response.send("ok")

        router = Router()
        router.route("/x").get(handler)
        async with TestClient(router) as client:
            await client.get("/x")
        assert seen[0].body == b""

    async def test_disconnect_mid_body_is_500(self) -> None:
        router, seen = _echo_router()
        async with TestClient(router) as client:
            response = await client.request(
                "POST", "/upload", chunks=[b"part", b"never"], disconnect=True
            )
        assert response.status == 500
        assert seen == []


class TestMultipart:
    async def test_parts_are_split(self) -> None:
        router, seen = _echo_router()
        body = _multipart(
            ("title", b"Hello", None, None),
            ("tag", b"a", None, None),
            ("tag", b"b", None, None),
            ("avatar", b"\x89PNG", "me.png", "image/png"),
        )
        async with TestClient(router) as client:
            response = await client.post(
                "/upload",
                body=body,
                headers={"Content-Type": f"multipart/form-data; boundary={BOUNDARY}"},
            )
        assert response.status == 200
        form = seen[0].form
        assert isinstance(form, FormData)
        assert seen[0].body is form
        assert form["title"] == "Hello"
        assert form.get_list("tag") == ["a", "b"]
        assert [p.name for p in form.parts] == ["title", "tag", "tag", "avatar"]
        avatar = form.files["avatar"]
        assert avatar.filename == "me.png"
        assert avatar.content_type == "image/png"
        assert await avatar.read() == b"\x89PNG"

    async def test_missing_boundary_is_400(self) -> None:
        router, seen = _echo_router()
        async with TestClient(router) as client:
            response = await client.post(
                "/upload", body=b"whatever", headers={"Content-Type": "multipart/form-data"}
            )
        assert response.status == 400
        assert seen == []


class TestClassify:
    def test_json(self) -> None:
        request = _request("application/json")
        classify(request, b'{"ok": true}')
        assert request.body == {"ok": True}
        assert request.file is None

    def test_bad_json_attaches_nothing(self) -> None:
        request = _request("application/json")
        with pytest.raises(BadRequest):
            classify(request, b"{")
        assert request.body is None
        assert request.raw_body is None

    def test_text_is_raw(self) -> None:
        request = _request("text/plain")
        classify(request, b"hi")
        assert request.body == b"hi"
        assert isinstance(request.file, BodyStream)


class TestBodyStream:
    async def test_read_in_pieces(self) -> None:
        stream = BodyStream(b"abcdef")
        assert await stream.read(2) == b"ab"
        assert await stream.read() == b"cdef"
        assert await stream.read() == b""

    async def test_iterates_remaining(self) -> None:
        stream = BodyStream(b"abcdef")
        await stream.read(4)
        chunks = [chunk async for chunk in stream]
        assert chunks == [b"ef"]

    def test_size(self) -> None:
        assert BodyStream(b"abc").size == 3
