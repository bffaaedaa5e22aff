# fitz_patchwork/synthesis/schema_merge.py
"""
Schema merging: grow the schema file without clobbering it.

New content is split into exported declaration blocks. A block is
appended only when the existing file declares nothing of the same kind
and name, so repeated runs never duplicate or reorder declarations.
"""

import logging
import re

from .types import DeclarationBlock

logger = logging.getLogger(__name__)

_DECL_START_RE = re.compile(r"^export\s+(?P<keyword>const|type)\s+(?P<name>[A-Za-z_$][\w$]*)", re.MULTILINE)
_TABLE_HEADER_RE = re.compile(
    r"^export\s+const\s+(?P<name>[A-Za-z_$][\w$]*)\s*=\s*(?:sqliteTable|pgTable|mysqlTable)\s*\(",
    re.MULTILINE,
)
_COLUMN_RE = re.compile(
    r"^\s*(?P<name>[A-Za-z_$][\w$]*)\s*:\s*(?P<type>text|integer|real|numeric|blob|varchar|boolean|timestamp)\s*\((?P<args>[^)]*)\)(?P<chain>[^\n]*)",
    re.MULTILINE,
)


def split_declarations(content: str) -> list[DeclarationBlock]:
    """
    Split schema source into its exported declarations, in order.

    Each block runs from its "export const"/"export type" marker up to
    the next marker; text before the first marker is not a block.
    """
    starts = list(_DECL_START_RE.finditer(content))
    blocks = []
    for i, match in enumerate(starts):
        end = starts[i + 1].start() if i + 1 < len(starts) else len(content)
        kind = "value" if match.group("keyword") == "const" else "type"
        blocks.append(
            DeclarationBlock(name=match.group("name"), kind=kind, raw_text=content[match.start():end])
        )
    return blocks


def declares(text: str, block: DeclarationBlock) -> bool:
    """True when text already declares block's kind and name."""
    pattern = rf"^export\s+{block.keyword}\s+{re.escape(block.name)}(?![\w$])"
    return re.search(pattern, text, re.MULTILINE) is not None


def merge_schema(existing: str, new_content: str) -> str:
    """
    Append the declarations of new_content that existing lacks.

    Args:
        existing: Current schema file text
        new_content: Schema text proposed by the model

    Returns:
        Merged schema text ending in a single newline
    """
    merged = existing.strip()
    appended = []
    for block in split_declarations(new_content):
        if declares(merged, block):
            logger.debug(f"Schema already declares {block.keyword} {block.name}, skipping")
            continue
        merged = f"{merged}\n\n{block.raw_text.strip()}" if merged else block.raw_text.strip()
        appended.append(block.name)

    if appended:
        logger.info(f"Merged schema declarations: {', '.join(appended)}")
    return merged + "\n"


def table_symbols(content: str) -> list[str]:
    """Names of the tables declared in schema content, in order."""
    return [m.group("name") for m in _TABLE_HEADER_RE.finditer(content)]


def table_columns(content: str, symbol: str) -> list[tuple[str, str, str]]:
    """
    (column, builder, call text) triples for one declared table.

    Returns an empty list when the table is not declared in content.
    """
    for block in split_declarations(content):
        if block.kind == "value" and block.name == symbol:
            return [
                (m.group("name"), m.group("type"), m.group("args") + m.group("chain"))
                for m in _COLUMN_RE.finditer(block.raw_text)
            ]
    return []
