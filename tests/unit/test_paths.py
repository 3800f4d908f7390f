"""
Unit tests for URL path normalization.
"""

import pytest

from fileserver.http.paths import normalize_path, split_segments


class TestNormalizePath:
    """Tests for normalize_path."""

    @pytest.mark.parametrize("path, expected", [
        ("../../../../etc///passwd", "etc/passwd"),
        ("/./../.././//././//./././tmp/././././", "tmp"),
        ("/usr/bin/../lib//./", "usr/lib"),
        ("/", ""),
        ("", ""),
        ("/a/b/c", "a/b/c"),
        ("a/./b/../c/", "a/c"),
        ("/../../", ""),
        ("/sub/..", ""),
        ("/my file.txt", "my file.txt"),
    ])
    def test_examples(self, path, expected):
        assert normalize_path(path) == expected

    @pytest.mark.parametrize("path", [
        "../../../../etc///passwd",
        "/usr/bin/../lib//./",
        "/a/../../b/./c/..//d",
        "...//..../.",
        "",
    ])
    def test_idempotent(self, path):
        once = normalize_path(path)
        assert normalize_path(once) == once

    @pytest.mark.parametrize("depth", [1, 2, 10, 100])
    def test_leading_dotdot_never_escapes(self, depth):
        path = "/" + "../" * depth + "etc/passwd"
        assert normalize_path(path) == "etc/passwd"

    def test_dots_in_names_are_kept(self):
        assert normalize_path("/.hidden/...") == ".hidden/..."


class TestSplitSegments:
    """Tests for split_segments."""

    def test_root_is_empty(self):
        assert split_segments("/") == []

    def test_no_special_segments_remain(self):
        segments = split_segments("/a/./../b//c/../../d/")
        assert segments == ["d"]

    def test_join_matches_normalize(self):
        path = "/x/y/../z/./"
        assert "/".join(split_segments(path)) == normalize_path(path)
