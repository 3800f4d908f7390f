"""
Unit tests for percent-encoding and HTML escaping.
"""

import string

import pytest

from fileserver.errors import DecodeError, MalformedEncoding, UnsupportedCharacter
from fileserver.http.encoding import (
    UNRESERVED,
    percent_encode,
    percent_decode,
    html_escape,
    display_text,
)


class TestPercentEncode:
    """Tests for percent_encode."""

    def test_unreserved_pass_through(self):
        text = string.ascii_letters + string.digits + ".~_-"
        assert percent_encode(text) == text

    def test_space_and_reserved(self):
        assert percent_encode("my file.txt") == "my%20file.txt"
        assert percent_encode("a&b") == "a%26b"
        assert percent_encode("a/b") == "a%2Fb"
        assert percent_encode("100%") == "100%25"
        assert percent_encode("a+b") == "a%2Bb"

    def test_uppercase_hex(self):
        assert percent_encode("?") == "%3F"

    def test_utf8_bytes(self):
        assert percent_encode("café") == "caf%C3%A9"
        assert percent_encode("📄") == "%F0%9F%93%84"

    def test_ascii_only_rejects_non_ascii(self):
        with pytest.raises(UnsupportedCharacter) as exc_info:
            percent_encode("é", ascii_only=True)
        assert exc_info.value.char == "é"

    def test_ascii_only_accepts_ascii(self):
        assert percent_encode("a b", ascii_only=True) == "a%20b"

    def test_empty(self):
        assert percent_encode("") == ""


class TestPercentDecode:
    """Tests for percent_decode."""

    def test_plain_text_unchanged(self):
        assert percent_decode("/docs/readme.txt") == "/docs/readme.txt"

    def test_escapes(self):
        assert percent_decode("my%20file.txt") == "my file.txt"
        assert percent_decode("%2e%2E") == ".."

    def test_plus_is_space(self):
        assert percent_decode("a+b") == "a b"

    def test_encoded_plus_stays_plus(self):
        assert percent_decode("a%2Bb") == "a+b"

    def test_utf8_sequence(self):
        assert percent_decode("caf%C3%A9") == "café"

    def test_reverses_encode(self):
        for text in ["my file.txt", "a&b.txt", "café", "100% [draft].md"]:
            assert percent_decode(percent_encode(text)) == text

    def test_unreserved_round_trip(self):
        text = "".join(sorted(UNRESERVED))
        assert percent_decode(percent_encode(text)) == text

    @pytest.mark.parametrize("text", ["%4", "%", "abc%", "%zz", "%g0", "a%2"])
    def test_malformed(self, text):
        with pytest.raises(MalformedEncoding):
            percent_decode(text)

    def test_malformed_is_decode_error(self):
        with pytest.raises(DecodeError):
            percent_decode("%zz")

    def test_malformed_reports_position(self):
        with pytest.raises(MalformedEncoding) as exc_info:
            percent_decode("/ok%20/bad%x1")
        assert exc_info.value.position == 10


class TestHtmlEscape:
    """Tests for html_escape."""

    def test_all_special_characters(self):
        assert html_escape('<b>"it\'s"</b>') == "&lt;b&gt;&quot;it&apos;s&quot;&lt;/b&gt;"

    def test_ampersand_escaped_once(self):
        assert html_escape("a&b") == "a&amp;b"
        assert html_escape("&lt;") == "&amp;lt;"

    def test_plain_text_unchanged(self):
        assert html_escape("📄 notes.txt") == "📄 notes.txt"


class TestDisplayText:
    """Tests for display_text."""

    def test_valid_text_unchanged(self):
        assert display_text("café & 📄.txt") == "café & 📄.txt"

    def test_undecodable_byte_replaced(self):
        name = b"bad\xff.txt".decode("utf-8", "surrogateescape")

        assert display_text(name) == "bad�.txt"
        display_text(name).encode("utf-8")
