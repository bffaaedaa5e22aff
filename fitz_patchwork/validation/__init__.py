# fitz_patchwork/validation/__init__.py
"""Input validation and sanitization utilities."""

from .sanitize import sanitize_edit_path, sanitize_project_path, sanitize_query

__all__ = [
    "sanitize_project_path",
    "sanitize_query",
    "sanitize_edit_path",
]
