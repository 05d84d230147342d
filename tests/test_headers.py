"""Tests for switchyard.http.headers — case-insensitive request headers."""

import pytest

from switchyard.http.headers import Headers, media_type


class TestHeaders:
    def test_case_insensitive(self) -> None:
        h = Headers(((b"content-type", b"text/html"),))
        assert h["Content-Type"] == "text/html"
        assert "CONTENT-TYPE" in h

    def test_first_value_and_list(self) -> None:
        h = Headers(((b"accept", b"a"), (b"accept", b"b")))
        assert h["accept"] == "a"
        assert h.get_list("Accept") == ["a", "b"]
        assert len(h) == 1

    def test_missing(self) -> None:
        h = Headers()
        assert h.get("x") is None
        with pytest.raises(KeyError):
            h["x"]

    def test_from_dict(self) -> None:
        h = Headers.from_dict({"X-Token": "abc"})
        assert h["x-token"] == "abc"
        assert h.raw == ((b"x-token", b"abc"),)

    def test_non_string_key(self) -> None:
        assert 1 not in Headers()


class TestMediaType:
    def test_strips_parameters(self) -> None:
        assert media_type("Application/JSON; charset=utf-8") == "application/json"

    def test_multipart(self) -> None:
        assert media_type("multipart/form-data; boundary=x") == "multipart/form-data"

    def test_missing(self) -> None:
        assert media_type(None) is None
        assert media_type("") is None
