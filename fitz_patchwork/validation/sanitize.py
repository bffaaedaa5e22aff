# fitz_patchwork/validation/sanitize.py
"""
Input sanitization and validation utilities.

Provides path traversal protection and input validation for the query,
the project root and every path about to be written.
"""

import logging
from pathlib import Path, PurePosixPath

from fitz_patchwork.errors import InvalidInputError

logger = logging.getLogger(__name__)


def sanitize_project_path(user_path: str | Path) -> Path:
    """
    Sanitize and validate project path.

    Resolves to absolute path and checks existence.

    Args:
        user_path: User-provided path string

    Returns:
        Resolved absolute Path object

    Raises:
        InvalidInputError: If path doesn't exist or is not a directory
    """
    try:
        resolved = Path(user_path).resolve()
    except (ValueError, OSError) as e:
        raise InvalidInputError(f"Invalid path '{user_path}': {e}")

    if not resolved.exists():
        raise InvalidInputError(f"Path does not exist: {resolved}")

    if not resolved.is_dir():
        raise InvalidInputError(f"Path is not a directory: {resolved}")

    logger.debug(f"Sanitized project path: {resolved}")
    return resolved


def sanitize_query(text: str, max_length: int = 5000) -> str:
    """
    Sanitize and validate the user query.

    Strips whitespace and validates non-empty.
    Truncates to max_length if needed.

    Raises:
        InvalidInputError: If the query is empty after stripping
    """
    cleaned = text.strip()

    if not cleaned:
        raise InvalidInputError("Query cannot be empty")

    if len(cleaned) > max_length:
        logger.warning(f"Query truncated from {len(cleaned)} to {max_length} characters")
        cleaned = cleaned[:max_length]

    return cleaned


def sanitize_edit_path(root: Path, relative: str) -> Path:
    """
    Resolve a plan path against the project root, refusing escapes.

    Args:
        root: Resolved project root
        relative: Project-relative path from the plan

    Returns:
        Absolute target path inside root

    Raises:
        InvalidInputError: If the path is absolute, empty or leaves root
    """
    posix = PurePosixPath(relative.replace("\\", "/"))
    if not relative.strip() or posix.is_absolute() or Path(relative).is_absolute():
        raise InvalidInputError(f"Refusing to write outside the project: {relative!r}")

    target = (root / Path(*posix.parts)).resolve()
    if not target.is_relative_to(root.resolve()):
        raise InvalidInputError(f"Refusing to write outside the project: {relative!r}")
    return target
