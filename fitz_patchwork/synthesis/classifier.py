# fitz_patchwork/synthesis/classifier.py
"""
Content classification for code blocks that arrive without a path.

An ordered list of (name, predicate, resolver) rules; the first predicate
that holds decides the path. Predicates are pure functions of the code.
"""

import logging
import re
from collections.abc import Callable
from typing import NamedTuple

from fitz_patchwork.config.schema import LayoutConfig

from .identifiers import derive_route_name

logger = logging.getLogger(__name__)

_TABLE_DECL_RE = re.compile(r"\b(?:sqliteTable|pgTable|mysqlTable)\s*\(")
_DRIVER_RE = re.compile(r"\bnew\s+Database\s*\(|\bdrizzle\s*\(|\bcreateClient\s*\(")
_CREATE_TABLE_RE = re.compile(r"\bCREATE\s+TABLE\b", re.IGNORECASE)
_WRITE_CALL_RE = re.compile(r"\.(?:insert|delete)\s*\(")
_SEED_INTENT_RE = re.compile(r"seed|sample|mock|fixture", re.IGNORECASE)
_HTTP_EXPORT_RE = re.compile(
    r"export\s+(?:async\s+)?(?:function\s+|const\s+)(?:GET|POST|PUT|PATCH|DELETE)\b"
)


def declares_table(code: str) -> bool:
    return bool(_TABLE_DECL_RE.search(code))


def constructs_driver(code: str) -> bool:
    return bool(_DRIVER_RE.search(code)) and not declares_table(code) and not contains_ddl(code)


def contains_ddl(code: str) -> bool:
    return bool(_CREATE_TABLE_RE.search(code))


def seeds_data(code: str) -> bool:
    return bool(_WRITE_CALL_RE.search(code)) and bool(_SEED_INTENT_RE.search(code))


def exports_http_handlers(code: str) -> bool:
    return bool(_HTTP_EXPORT_RE.search(code))


class ClassificationRule(NamedTuple):
    name: str
    predicate: Callable[[str], bool]
    resolve: Callable[[str, str, LayoutConfig], str]


RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("schema", declares_table, lambda code, query, layout: layout.schema_path),
    ClassificationRule(
        "connection", constructs_driver, lambda code, query, layout: layout.connection_path
    ),
    ClassificationRule("sync", contains_ddl, lambda code, query, layout: layout.sync_path),
    ClassificationRule("seed", seeds_data, lambda code, query, layout: layout.seed_path),
    ClassificationRule(
        "route",
        exports_http_handlers,
        lambda code, query, layout: layout.route_path(derive_route_name(query, code)),
    ),
)


def classify_block(code: str, query: str = "", layout: LayoutConfig | None = None) -> str | None:
    """
    Infer the target path of an untagged code block.

    Args:
        code: Code block contents
        query: Original user query (used to name route handlers)
        layout: Project layout

    Returns:
        Project-relative path, or None when no rule matches
    """
    layout = layout or LayoutConfig()
    for rule in RULES:
        if rule.predicate(code):
            path = rule.resolve(code, query, layout)
            logger.debug(f"Classified untagged block as {rule.name}: {path}")
            return path
    return None
