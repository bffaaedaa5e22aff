# fitz_patchwork/synthesis/extractor.py
"""
Block extraction: pair fenced code blocks with the paths a model declared.

Four marker patterns are tried in a fixed order over the whole response
("// path", "# path", "**path**", "File: path"). Patterns are additive; a
path is kept the first time its normalized form is seen and later
occurrences are dropped. When no block carries a marker, every fenced
block is routed through the content classifier instead.
"""

import logging
import re

from fitz_patchwork.config.schema import LayoutConfig

from .classifier import classify_block
from .paths import normalize_path, resolve_path
from .types import FileEdit

logger = logging.getLogger(__name__)

_PATH = r"`?(?P<path>[\w@.\\/-]*[\w-]\.[A-Za-z0-9]+)`?"
_TO_FENCE = r"[ \t]*:?[ \t]*\r?\n(?:[ \t]*\r?\n)*[ \t]*"
_FENCE = r"```[\w+#.-]*[^\n]*\r?\n(?:(?P<code>.*?)\r?\n)??[ \t]*```"

PATH_MARKER_PATTERNS: tuple[tuple[str, re.Pattern], ...] = (
    ("slash-comment", re.compile(
        rf"^[ \t]*//[ \t]*(?:File:[ \t]*)?{_PATH}{_TO_FENCE}{_FENCE}",
        re.MULTILINE | re.DOTALL,
    )),
    ("hash-comment", re.compile(
        rf"^[ \t]*#{{1,6}}[ \t]*(?:File:[ \t]*)?{_PATH}{_TO_FENCE}{_FENCE}",
        re.MULTILINE | re.DOTALL,
    )),
    ("bold", re.compile(
        rf"\*\*[ \t]*(?:File:[ \t]*)?{_PATH}[ \t]*:?\*\*{_TO_FENCE}{_FENCE}",
        re.MULTILINE | re.DOTALL,
    )),
    ("file-label", re.compile(
        rf"^[ \t]*(?:\*\*)?File(?:name)?:(?:\*\*)?[ \t]*{_PATH}{_TO_FENCE}{_FENCE}",
        re.MULTILINE | re.DOTALL | re.IGNORECASE,
    )),
)

_ANY_FENCE_RE = re.compile(rf"^[ \t]*{_FENCE}", re.MULTILINE | re.DOTALL)


def _clean_code(code: str) -> str:
    return (code or "").strip() + "\n"


class BlockExtractor:
    """Collects FileEdits from a response, deduplicated by normalized path."""

    def __init__(self, layout: LayoutConfig | None = None):
        self.layout = layout or LayoutConfig()
        self.edits: list[FileEdit] = []
        self._seen: set[str] = set()

    def add(self, path: str, content: str) -> bool:
        """Record an edit unless its normalized path was already seen."""
        key = normalize_path(path, self.layout)
        if key in self._seen:
            logger.debug(f"Dropping duplicate block for {path}")
            return False
        self._seen.add(key)
        self.edits.append(FileEdit(path=resolve_path(path, self.layout), content=content))
        return True

    def extract_tagged(self, text: str) -> int:
        """Apply every marker pattern in order; returns the number of blocks kept."""
        kept = 0
        for name, pattern in PATH_MARKER_PATTERNS:
            for match in pattern.finditer(text):
                if self.add(match.group("path"), _clean_code(match.group("code"))):
                    logger.debug(f"{name} marker: {match.group('path')}")
                    kept += 1
        return kept

    def extract_untagged(self, text: str, query: str) -> int:
        """Classify every fenced block; unclassifiable blocks are discarded."""
        kept = 0
        for match in _ANY_FENCE_RE.finditer(text):
            code = match.group("code") or ""
            path = classify_block(code, query, self.layout)
            if path is None:
                logger.info("Discarding code block with no inferable path")
                continue
            if self.add(path, _clean_code(code)):
                kept += 1
        return kept


def extract_file_edits(text: str, query: str = "", layout: LayoutConfig | None = None) -> list[FileEdit]:
    """
    Extract (path, content) pairs from a raw model response.

    Args:
        text: Raw model response
        query: User query, used to name classified route handlers
        layout: Project layout

    Returns:
        FileEdits in discovery order, at most one per normalized path
    """
    extractor = BlockExtractor(layout)
    if extractor.extract_tagged(text) == 0:
        logger.info("No path-tagged blocks found, classifying fenced blocks")
        extractor.extract_untagged(text, query)
    logger.info(f"Extracted {len(extractor.edits)} file edits")
    return extractor.edits
