"""
Unit tests for MIME type detection.
"""

from pathlib import Path

import pytest

from fileserver.http.mime_types import (
    DEFAULT_MIME_TYPE,
    get_extension,
    get_mime_type,
)


class TestGetMimeType:
    """Tests for get_mime_type."""

    @pytest.mark.parametrize("filename, expected", [
        ("index.html", "text/html"),
        ("index.htm", "text/html"),
        ("photo.jpg", "image/jpeg"),
        ("photo.jpeg", "image/jpeg"),
        ("logo.png", "image/png"),
        ("notes.txt", "text/plain"),
        ("style.css", "text/css"),
        ("app.js", "text/javascript"),
        ("a.b.json", "application/json"),
    ])
    def test_known_extensions(self, filename, expected):
        assert get_mime_type(filename) == expected

    def test_no_extension(self):
        assert get_mime_type("noext") == "application/octet-stream"

    def test_unknown_extension(self):
        assert get_mime_type("archive.tar.gz") == DEFAULT_MIME_TYPE

    def test_case_sensitive(self):
        assert get_mime_type("INDEX.HTML") == DEFAULT_MIME_TYPE

    def test_trailing_dot(self):
        assert get_mime_type("file.") == DEFAULT_MIME_TYPE

    def test_accepts_path(self):
        assert get_mime_type(Path("/srv/www/index.htm")) == "text/html"

    def test_dot_in_directory_ignored(self):
        assert get_mime_type("/srv/site.v2/README") == DEFAULT_MIME_TYPE


class TestGetExtension:
    """Tests for get_extension."""

    def test_last_dot_wins(self):
        assert get_extension("a.b.json") == "json"

    def test_none_without_dot(self):
        assert get_extension("Makefile") is None

    def test_hidden_file(self):
        assert get_extension(".bashrc") == "bashrc"
