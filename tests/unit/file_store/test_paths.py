"""
Unit Tests for path normalization
"""
import pytest

from appforge.core.exceptions import InvalidPathError
from appforge.services.file_store.paths import (
    check_reserved_names,
    is_within,
    join_path,
    normalize_path,
    relative_to,
    split_path,
    validate_project_name,
)


class TestNormalizePath:
    """Tests for normalize_path"""

    @pytest.mark.parametrize("raw,expected", [
        ("a//b///c", "a/b/c"),
        ("a/b/", "a/b"),
        ("/a/b/", "/a/b"),
        ("//a", "/a"),
        ("./a/./b", "a/b"),
        ("a\\b\\c.ts", "a/b/c.ts"),
    ])
    def test_collapses_and_strips(self, raw, expected):
        """Repeated separators collapse and trailing separators are stripped"""
        assert normalize_path(raw) == expected

    @pytest.mark.parametrize("raw", ["", "/", "//", "./"])
    def test_degenerate_root(self, raw):
        """An empty result is the root"""
        assert normalize_path(raw) == "/"

    @pytest.mark.parametrize("raw", ["../etc", "a/../../b", "a/.."])
    def test_parent_segments_rejected(self, raw):
        """Parent directory references are never allowed"""
        with pytest.raises(InvalidPathError):
            normalize_path(raw)

    def test_dotted_names_are_not_parent_segments(self):
        """Names that merely contain dots are kept"""
        assert normalize_path("a/..b/c..") == "a/..b/c.."


class TestPathHelpers:
    """Tests for join/split/containment helpers"""

    def test_join_path_normalizes(self):
        assert join_path("/base/", "proj//", "src/App.tsx") == "/base/proj/src/App.tsx"

    def test_split_path(self):
        assert split_path("/base/proj/App.tsx") == ("/base/proj", "App.tsx")
        assert split_path("/top") == ("/", "top")
        assert split_path("single") == ("", "single")

    def test_is_within_respects_segment_boundaries(self):
        """foo2 is not inside foo"""
        assert is_within("/s/foo/a", "/s/foo")
        assert is_within("/s/foo", "/s/foo")
        assert not is_within("/s/foo2/a", "/s/foo")

    def test_relative_to(self):
        assert relative_to("/s/foo/src/a.ts", "/s/foo") == "src/a.ts"
        assert relative_to("/s/foo", "/s/foo") == ""


class TestValidateProjectName:
    """Tests for project name validation"""

    def test_valid_name_is_trimmed(self):
        assert validate_project_name("  Todo App ") == "Todo App"

    @pytest.mark.parametrize("name", ["", "   ", ".", "..", "a/b", "a\\b", "todo.appforge.tmp"])
    def test_invalid_names(self, name):
        with pytest.raises(InvalidPathError):
            validate_project_name(name)


class TestCheckReservedNames:
    """Tests for the reserved temp-file suffix"""

    def test_ordinary_paths_pass(self):
        assert check_reserved_names("src/tmp/App.tsx") == "src/tmp/App.tsx"
        assert check_reserved_names("notes.appforge.tmp.md") == "notes.appforge.tmp.md"

    @pytest.mark.parametrize("path", ["notes.appforge.tmp", "drafts.appforge.tmp/a.ts", "a/.b.1234abcd.appforge.tmp"])
    def test_reserved_segments_rejected(self, path):
        with pytest.raises(InvalidPathError):
            check_reserved_names(path)
