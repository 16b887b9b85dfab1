"""Tests for daybook.journal.record."""

import pytest

from daybook.core.exceptions import DecodeError
from daybook.journal import record as rc


class TestEncode:
    def test_layout(self):
        blob = rc.encode("Morning", ["a.jpg", "b.png"], "Line one\nLine two")
        assert blob == 'Morning\n["a.jpg", "b.png"]\nLine one\nLine two'

    def test_empty_images(self):
        assert rc.encode("T", [], "") == "T\n[]\n"
        assert rc.encode("T", None, "x") == "T\n[]\nx"

    def test_title_newlines_collapsed(self):
        blob = rc.encode("Two\nlines\r\nhere", [], "body")
        assert blob.split("\n", 1)[0] == "Two lines here"

    def test_unicode_kept_readable(self):
        blob = rc.encode("Café", ["façade.jpg"], "ü")
        assert '"façade.jpg"' in blob


class TestDecode:
    @pytest.mark.parametrize(
        "title,images,body",
        [
            ("Morning", [], "Went for a walk."),
            ("Trip", ["a.jpg", "b.jpg"], "Day one\n\nDay two\n"),
            ("  spaced title ", ["x.webp"], ""),
            ("Notes", [], "Tags: a, b\n\n[\"not\", \"images\"]\nmore"),
        ],
    )
    def test_roundtrip(self, title, images, body):
        decoded = rc.decode(rc.encode(title, images, body))
        assert decoded.as_tuple() == (title, images, body)

    def test_body_keeps_extra_newlines(self):
        decoded = rc.decode("T\n[]\na\nb\nc")
        assert decoded.body == "a\nb\nc"

    def test_missing_image_line(self):
        decoded = rc.decode("Only a title")
        assert decoded.title == "Only a title"
        assert decoded.images == []
        assert decoded.body == ""

    def test_malformed_image_line(self):
        decoded = rc.decode("T\n{broken\nbody")
        assert decoded.images == []
        assert decoded.body == "body"
        assert not decoded.images_valid

    def test_image_line_not_a_list(self):
        decoded = rc.decode('T\n{"a": 1}\nbody')
        assert decoded.images == []

    def test_non_string_images_dropped(self):
        decoded = rc.decode('T\n["a.jpg", 3, null, "b.jpg"]\nbody')
        assert decoded.images == ["a.jpg", "b.jpg"]

    def test_empty_blob(self):
        decoded = rc.decode("")
        assert decoded.as_tuple() == ("", [], "")

    def test_crlf_header_lines(self):
        decoded = rc.decode('T\r\n["a.jpg"]\r\nbody\r\n')
        assert decoded.title == "T"
        assert decoded.images == ["a.jpg"]
        assert decoded.body == "body\r\n"


class TestDecodeStrict:
    def test_valid(self):
        assert rc.decode_strict("T\n[]\nb").title == "T"

    def test_invalid_raises(self):
        with pytest.raises(DecodeError):
            rc.decode_strict("T\nnope\nb")
