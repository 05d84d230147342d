"""Tests for switchyard.http.response — the ResponseWriter sink."""

import logging

from switchyard.http.response import ResponseWriter, body_allowed


class _Sink:
    def __init__(self) -> None:
        self.messages: list[dict] = []

    async def __call__(self, message: dict) -> None:
        self.messages.append(message)

    @property
    def start(self) -> dict:
        return self.messages[0]

    @property
    def body(self) -> bytes:
        return b"".join(m.get("body", b"") for m in self.messages[1:])

    def header(self, name: bytes) -> bytes | None:
        for key, value in self.start["headers"]:
            if key == name:
                return value
        return None


class TestHeaders:
    def test_chaining(self) -> None:
        r = ResponseWriter(_Sink())
        assert r.status(201).set_header("X-A", "1") is r
        assert r.status_code == 201

    def test_set_header_replaces_case_insensitively(self) -> None:
        r = ResponseWriter(_Sink())
        r.set_header("X-A", "1").set_header("x-a", "2")
        assert r.headers == (("x-a", "2"),)

    def test_append_header_keeps_both(self) -> None:
        r = ResponseWriter(_Sink())
        r.append_header("Set-Cookie", "a=1").append_header("Set-Cookie", "b=2")
        assert len(r.headers) == 2

    def test_get_and_remove(self) -> None:
        r = ResponseWriter(_Sink())
        r.set_headers({"A": "1", "B": "2"})
        assert r.get_header("a") == "1"
        r.remove_header("A")
        assert r.get_header("A") is None
        assert r.get_header("B") == "2"


class TestTerminalHelpers:
    async def test_json(self) -> None:
        sink = _Sink()
        await ResponseWriter(sink).status(201).json({"ok": True})
        assert sink.start["status"] == 201
        assert sink.header(b"content-type") == b"application/json"
        assert sink.header(b"content-length") == b"12"
        assert sink.body == b'{"ok": true}'

    async def test_send_text(self) -> None:
        sink = _Sink()
        await ResponseWriter(sink).send("hello")
        assert sink.header(b"content-type") == b"text/plain; charset=utf-8"
        assert sink.body == b"hello"

    async def test_send_keeps_explicit_content_type(self) -> None:
        sink = _Sink()
        await ResponseWriter(sink).set_header("Content-Type", "text/html").send("<p>hi</p>")
        assert sink.header(b"content-type") == b"text/html"

    async def test_send_bytes(self) -> None:
        sink = _Sink()
        await ResponseWriter(sink).send_bytes(b"\x00", content_type="application/octet-stream")
        assert sink.body == b"\x00"

    async def test_second_response_ignored(self, caplog) -> None:
        sink = _Sink()
        r = ResponseWriter(sink)
        await r.send("first")
        with caplog.at_level(logging.WARNING, logger="switchyard.server"):
            await r.send("second")
        assert sink.body == b"first"
        assert r.finished
        assert "already finished" in caplog.text

    async def test_status_after_start_ignored(self) -> None:
        r = ResponseWriter(_Sink())
        await r.start()
        r.status(500)
        assert r.status_code == 200


class TestStreaming:
    async def test_write_then_end(self) -> None:
        sink = _Sink()
        r = ResponseWriter(sink)
        await r.write(b"a")
        await r.write(b"b")
        await r.end(b"c")
        assert sink.body == b"abc"
        assert [m.get("more_body") for m in sink.messages[1:]] == [True, True, False]
        assert r.sent

    async def test_abort_sends_no_final_chunk(self, caplog) -> None:
        sink = _Sink()
        r = ResponseWriter(sink)
        await r.start(content_length=10)
        await r.write(b"abc")
        with caplog.at_level(logging.WARNING, logger="switchyard.server"):
            r.abort()
        assert r.finished
        await r.end(b"rest")
        await r.write(b"more")
        assert sink.body == b"abc"
        assert [m.get("more_body") for m in sink.messages[1:]] == [True]
        assert "aborted" in caplog.text

    async def test_no_body_for_204(self) -> None:
        sink = _Sink()
        await ResponseWriter(sink).status(204).send("ignored")
        assert sink.body == b""

    def test_body_allowed(self) -> None:
        assert body_allowed(200)
        assert not body_allowed(204)
        assert not body_allowed(304)
        assert not body_allowed(101)
