# fitz_patchwork/synthesis/paths.py
"""
Project path resolution and dedup keys.

resolve_path() maps the many ways a model spells a path onto the
project's real layout. normalize_path() reduces a path further to the key
used for deduplication only; it is never written to disk.
"""

import re

from fitz_patchwork.config.schema import LayoutConfig

_DEFAULT_LAYOUT = LayoutConfig()


def resolve_path(path: str, layout: LayoutConfig = _DEFAULT_LAYOUT) -> str:
    """
    Rewrite a model-declared path into a project-relative path.

    Args:
        path: Path as written by the model (any separator, alias or prefix)
        layout: Project layout

    Returns:
        Project-relative path with forward slashes
    """
    cleaned = path.strip().strip("`'\"").replace("\\", "/")
    cleaned = re.sub(r"/{2,}", "/", cleaned)
    while cleaned.startswith("./"):
        cleaned = cleaned[2:]

    root = layout.source_root.strip("/")
    alias = layout.alias_prefix
    if alias and cleaned.startswith(alias):
        return f"{root}/{cleaned[len(alias):]}"

    segments = cleaned.split("/")
    folded = [segment.casefold() for segment in segments]
    if root.casefold() in folded:
        return "/".join(segments[folded.index(root.casefold()):])

    head = folded[0]
    # Bare "api/x" is a route folder, so it lands under routes_dir, not "<root>/api".
    if head == "api" and len(segments) > 1:
        return f"{layout.routes_dir.rstrip('/')}/{'/'.join(segments[1:])}"
    known = {folder.casefold() for folder in layout.known_folders}
    if head in known and len(segments) > 1:
        return f"{root}/{cleaned}"
    return cleaned


def normalize_path(path: str, layout: LayoutConfig = _DEFAULT_LAYOUT) -> str:
    """Dedup key: resolved, root-prefix-stripped, case-folded."""
    resolved = resolve_path(path, layout).casefold()
    root = layout.source_root.strip("/").casefold() + "/"
    if resolved.startswith(root):
        resolved = resolved[len(root):]
    return resolved


def same_path(a: str, b: str, layout: LayoutConfig = _DEFAULT_LAYOUT) -> bool:
    return normalize_path(a, layout) == normalize_path(b, layout)
