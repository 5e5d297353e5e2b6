"""
Tests for stowage.core.paths and FileMetadata derived properties.
"""

import pytest

from stowage.core.models import FileMetadata, TransferProgress, TransferSummary
from stowage.core.paths import (
    file_name,
    is_same_or_descendant,
    join_path,
    matches_pattern,
    normalize_path,
    parent_path,
    relative_path,
)


class TestNormalizePath:
    """Tests for normalize_path."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (None, ""),
            ("", ""),
            ("/", ""),
            ("docs/", "docs"),
            ("/docs/a.txt", "docs/a.txt"),
            ("docs//img///logo.png", "docs/img/logo.png"),
            ("docs\\img\\logo.png", "docs/img/logo.png"),
            ("./docs/./a.txt", "docs/a.txt"),
        ],
    )
    def test_normalize(self, raw, expected):
        """Test separators and edge slashes are normalized."""
        assert normalize_path(raw) == expected


class TestPathHelpers:
    """Tests for join/parent/relative helpers."""

    def test_join_path(self):
        """Test joining tolerates empty sides."""
        assert join_path("backup", "docs/a.txt") == "backup/docs/a.txt"
        assert join_path("", "a.txt") == "a.txt"
        assert join_path("backup", "") == "backup"

    def test_file_and_parent(self):
        """Test name and parent extraction."""
        assert file_name("docs/img/logo.png") == "logo.png"
        assert parent_path("docs/img/logo.png") == "docs/img"
        assert parent_path("notes.txt") == ""

    def test_relative_path_is_case_insensitive(self):
        """Test the source prefix is stripped regardless of case."""
        assert relative_path("Docs/Img/logo.png", "docs") == "Img/logo.png"
        assert relative_path("docs", "docs") == ""
        assert relative_path("other/a.txt", "docs") == "other/a.txt"

    def test_descendant_checks(self):
        """Test subtree membership."""
        assert is_same_or_descendant("docs/img", "docs")
        assert is_same_or_descendant("DOCS", "docs")
        assert not is_same_or_descendant("docsets", "docs")
        assert is_same_or_descendant("anything", "")


class TestMatchesPattern:
    """Tests for matches_pattern."""

    @pytest.mark.parametrize("pattern", [None, "", "*", "*.*"])
    def test_match_all_patterns(self, pattern):
        """Test match-all patterns accept names without a dot."""
        assert matches_pattern("Makefile", pattern)
        assert matches_pattern("a.txt", pattern)

    def test_glob_is_case_insensitive(self):
        """Test glob patterns ignore case."""
        assert matches_pattern("REPORT.TXT", "*.txt")
        assert not matches_pattern("report.csv", "*.txt")
        assert matches_pattern("data-01.csv", "data-??.csv")


class TestModels:
    """Tests for value models."""

    def test_metadata_derived_properties(self):
        """Test parent, name and extension derive from path."""
        metadata = FileMetadata(path="docs/img/logo.png", length=64)

        assert metadata.parent == "docs/img"
        assert metadata.name == "logo.png"
        assert metadata.extension == "png"

    def test_metadata_root_file_without_extension(self):
        """Test a root-level file without a dot."""
        metadata = FileMetadata(path="Makefile")

        assert metadata.parent is None
        assert metadata.name == "Makefile"
        assert metadata.extension is None

    def test_progress_percent(self):
        """Test percent is None when the total is unknown."""
        assert TransferProgress(files_processed=1, total_files=4).percent == 25.0
        assert TransferProgress(files_processed=3, total_files=-1).percent is None

    def test_summary_to_dict(self):
        """Test summary serialization and success flag."""
        summary = TransferSummary(processed=2, total=3, failed_paths=["b.txt"])
        data = summary.to_dict()

        assert summary.success is False
        assert data["failed"] == 1
        assert data["failed_paths"] == ["b.txt"]
