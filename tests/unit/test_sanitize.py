# tests/unit/test_sanitize.py
"""Tests for input sanitization."""

import pytest

from fitz_patchwork.errors import InvalidInputError
from fitz_patchwork.validation.sanitize import (
    sanitize_edit_path,
    sanitize_project_path,
    sanitize_query,
)


class TestSanitizeQuery:
    def test_strips(self):
        assert sanitize_query("  track 'top tracks'  ") == "track 'top tracks'"

    def test_empty(self):
        with pytest.raises(InvalidInputError, match="empty"):
            sanitize_query("   ")

    def test_truncates(self):
        assert len(sanitize_query("x" * 20, max_length=10)) == 10


class TestSanitizeProjectPath:
    def test_valid(self, tmp_path):
        assert sanitize_project_path(str(tmp_path)) == tmp_path.resolve()

    def test_missing(self, tmp_path):
        with pytest.raises(InvalidInputError, match="does not exist"):
            sanitize_project_path(tmp_path / "missing")

    def test_file(self, tmp_path):
        target = tmp_path / "f.txt"
        target.write_text("x", encoding="utf-8")
        with pytest.raises(InvalidInputError, match="not a directory"):
            sanitize_project_path(target)


class TestSanitizeEditPath:
    def test_inside_root(self, tmp_path):
        root = tmp_path.resolve()
        assert sanitize_edit_path(root, "src/db/schema.ts") == root / "src" / "db" / "schema.ts"

    def test_backslashes(self, tmp_path):
        root = tmp_path.resolve()
        assert sanitize_edit_path(root, "src\\db\\seed.ts") == root / "src" / "db" / "seed.ts"

    @pytest.mark.parametrize("path", ["../x.ts", "src/../../x.ts", "/etc/passwd", ""])
    def test_escapes_rejected(self, tmp_path, path):
        with pytest.raises(InvalidInputError):
            sanitize_edit_path(tmp_path.resolve(), path)
