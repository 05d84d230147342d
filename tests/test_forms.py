"""Tests for switchyard.http.forms — multipart parsing."""

import pytest

from switchyard.errors import BadRequest
from switchyard.http.forms import FormData, FormPart, parse_multipart

BOUNDARY = "xyz123"
CONTENT_TYPE = f"multipart/form-data; boundary={BOUNDARY}"


def _body(*sections: str) -> bytes:
    parts = [f"--{BOUNDARY}\r\n{section}\r\n" for section in sections]
    return ("".join(parts) + f"--{BOUNDARY}--\r\n").encode()


class TestParseMultipart:
    def test_text_fields(self) -> None:
        body = _body(
            'Content-Disposition: form-data; name="a"\r\n\r\n1',
            'Content-Disposition: form-data; name="b"\r\n\r\ntwo words',
        )
        form = parse_multipart(body, CONTENT_TYPE)
        assert form["a"] == "1"
        assert form["b"] == "two words"
        assert form.files == {}

    def test_file_field(self) -> None:
        body = _body(
            'Content-Disposition: form-data; name="doc"; filename="notes.txt"\r\n'
            "Content-Type: text/plain\r\n\r\nhello"
        )
        form = parse_multipart(body, CONTENT_TYPE)
        upload = form.files["doc"]
        assert upload.filename == "notes.txt"
        assert upload.size == 5
        assert "doc" not in form

    def test_file_without_content_type(self) -> None:
        body = _body('Content-Disposition: form-data; name="f"; filename="x.bin"\r\n\r\n\x01')
        part = parse_multipart(body, CONTENT_TYPE).parts[0]
        assert part.content_type == "application/octet-stream"
        assert part.is_file

    def test_missing_boundary(self) -> None:
        with pytest.raises(BadRequest, match="boundary"):
            parse_multipart(b"", "multipart/form-data")


class TestFormData:
    def test_first_value_wins(self) -> None:
        form = FormData((FormPart("k", b"1"), FormPart("k", b"2")))
        assert form["k"] == "1"
        assert form.get_list("k") == ["1", "2"]
        assert form.get("missing", "d") == "d"

    async def test_upload_save(self, tmp_path) -> None:
        form = FormData((FormPart("f", b"data", filename="f.txt"),))
        target = tmp_path / "out.txt"
        await form.files["f"].save(target)
        assert target.read_bytes() == b"data"
