# fitz_patchwork/synthesis/text_patch.py
"""
Targeted text normalizations applied to every FileEdit before writing.

1. Extensionless local imports ("./name") and aliased database imports
   ("@/db/name") get the canonical module extension.
2. The connection bootstrap gets exactly one database construction line
   rooted at the working directory, and "import path from 'path'" as its
   first line.

All rewriting goes through normalize_content(); each rule is a separate
function so it can be pinned down by examples.
"""

import logging
import re

from fitz_patchwork.config.schema import LayoutConfig

from .paths import same_path
from .types import FileEdit

logger = logging.getLogger(__name__)

_KNOWN_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".json", ".css", ".scss", ".svg")
_COMPONENT_SUFFIXES = (".tsx", ".jsx")

_IMPORT_TARGET_RE = re.compile(
    r"(?P<lead>\bfrom\s*|\bimport\s*\(?\s*|\brequire\s*\(\s*)"
    r"(?P<quote>['\"])(?P<target>[^'\"\n]+)(?P=quote)"
)
_DB_CONSTRUCTION_RE = re.compile(
    r"^(?P<indent>[ \t]*)(?:export\s+)?(?:const|let|var)\s+(?P<name>[A-Za-z_$][\w$]*)\s*=\s*new\s+Database\s*\(",
    re.MULTILINE,
)
_PATH_IMPORT_RE = re.compile(r"^import\s+(?:\*\s+as\s+)?path\s+from\s+['\"](?:node:)?path['\"];?[ \t]*\r?\n?", re.MULTILINE)
_IMPORT_STMT_RE = re.compile(r"^import\b[^;'\"]*?['\"][^'\"\n]*['\"][ \t]*;?", re.MULTILINE)

PATH_IMPORT_LINE = "import path from 'path';"


def _needs_extension(target: str, alias_db_prefix: str, rewrite_relative: bool) -> bool:
    if target.endswith(_KNOWN_EXTENSIONS):
        return False
    if rewrite_relative and target.startswith("./") and len(target) > 2:
        return True
    return target.startswith(alias_db_prefix) and len(target) > len(alias_db_prefix)


def add_import_extensions(content: str, layout: LayoutConfig, rewrite_relative: bool = True) -> str:
    """
    Append the module extension to extensionless local and aliased db imports.

    Args:
        content: Source text
        layout: Project layout (alias prefix and module extension)
        rewrite_relative: Also rewrite "./name" imports (off for component files)

    Returns:
        Rewritten source text
    """
    db_dir = layout.connection_path.rsplit("/", 1)[0]
    root = layout.source_root.strip("/") + "/"
    if db_dir.startswith(root):
        db_dir = db_dir[len(root):]
    alias_db_prefix = f"{layout.alias_prefix}{db_dir}/"

    def _rewrite(match: re.Match) -> str:
        target = match.group("target")
        if not _needs_extension(target, alias_db_prefix, rewrite_relative):
            return match.group(0)
        quote = match.group("quote")
        return f"{match.group('lead')}{quote}{target}{layout.module_extension}{quote}"

    return _IMPORT_TARGET_RE.sub(_rewrite, content)


def _call_end(content: str, start: int) -> int:
    """Index just past the ')' closing the call whose '(' precedes start; -1 if unbalanced."""
    depth = 1
    i = start
    while i < len(content):
        char = content[i]
        if char in "'\"`":
            i += 1
            while i < len(content) and content[i] != char:
                i += 2 if content[i] == "\\" else 1
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return -1


def construction_spans(content: str) -> list[tuple[re.Match, int]]:
    """
    Database constructions as (header match, end offset).

    The span runs through the closing parenthesis, so multi-line argument
    lists are covered, and on to the end of that line.
    """
    spans = []
    cursor = 0
    for match in _DB_CONSTRUCTION_RE.finditer(content):
        if match.start() < cursor:
            continue
        close = _call_end(content, match.end())
        if close == -1:
            close = match.end()
        newline = content.find("\n", close)
        end = len(content) if newline == -1 else newline
        spans.append((match, end))
        cursor = end
    return spans


def canonical_construction_line(layout: LayoutConfig, name: str = "sqlite", indent: str = "") -> str:
    return f"{indent}const {name} = new Database(path.join(process.cwd(), '{layout.database_file}'));"


def normalize_connection(content: str, layout: LayoutConfig) -> str:
    """
    Pin the connection bootstrap to one cwd-rooted database construction.

    Existing constructions are replaced whole, multi-line argument lists
    included (the first keeps its variable name, later ones are dropped);
    when there is none, one is inserted after the last import. The path
    import becomes the first line.
    """
    spans = construction_spans(content)
    if spans:
        first = spans[0][0]
        replacement = canonical_construction_line(layout, first.group("name"), first.group("indent"))
        pieces = []
        cursor = 0
        for i, (match, end) in enumerate(spans):
            pieces.append(content[cursor:match.start()])
            if i == 0:
                pieces.append(replacement)
                cursor = end
            else:
                cursor = end + 1 if content[end:end + 1] == "\n" else end
        pieces.append(content[cursor:])
        content = "".join(pieces)
    else:
        imports = list(_IMPORT_STMT_RE.finditer(content))
        line = canonical_construction_line(layout)
        if imports:
            at = imports[-1].end()
            content = f"{content[:at]}\n\n{line}{content[at:]}"
        else:
            content = f"{line}\n{content}"
        logger.debug("Inserted database construction line into connection bootstrap")

    content = _PATH_IMPORT_RE.sub("", content).lstrip("\n")
    return f"{PATH_IMPORT_LINE}\n{content}"


def normalize_content(edit: FileEdit, layout: LayoutConfig | None = None) -> FileEdit:
    """
    Apply every text normalization that fits the edit's path.

    Args:
        edit: FileEdit to normalize
        layout: Project layout

    Returns:
        New FileEdit with normalized content
    """
    layout = layout or LayoutConfig()
    # Components keep extensionless "./name" imports; the bundler resolves them.
    content = add_import_extensions(
        edit.content, layout, rewrite_relative=not edit.path.endswith(_COMPONENT_SUFFIXES)
    )
    if same_path(edit.path, layout.connection_path, layout):
        content = normalize_connection(content, layout)
    if content != edit.content:
        logger.debug(f"Normalized content of {edit.path}")
    return FileEdit(path=edit.path, content=content)
