# fitz_patchwork/project/context.py
"""
Project context gathering.

Reads a fixed list of candidate paths per file kind (schema, connection,
seed, sync, manifest), plus existing route handlers and the first
composition file found among its candidates. The resulting description
is both the context sent to the model and the text that scaffold
presence checks search.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from fitz_patchwork.config.schema import LayoutConfig

logger = logging.getLogger(__name__)

CANDIDATE_PATHS: dict[str, tuple[str, ...]] = {
    "schema": ("src/db/schema.ts", "db/schema.ts", "src/lib/db/schema.ts"),
    "connection": ("src/db/connection.ts", "db/connection.ts", "src/db/index.ts", "src/lib/db.ts"),
    "seed": ("src/db/seed.ts", "db/seed.ts"),
    "sync": ("src/db/sync.ts", "db/sync.ts"),
    "manifest": ("package.json",),
}

COMPOSITION_CANDIDATES: tuple[str, ...] = (
    "src/components/main-content.tsx",
    "src/components/spotify-main-content.tsx",
    "components/main-content.tsx",
    "components/spotify-main-content.tsx",
)

# LayoutConfig field holding the configured path for each kind
_LAYOUT_FIELDS = {
    "schema": "schema_path",
    "connection": "connection_path",
    "seed": "seed_path",
    "sync": "sync_path",
    "manifest": "manifest_path",
}


@dataclass
class ContextEntry:
    """One context file: found (path + content) or not found."""

    kind: str
    path: str | None = None
    content: str | None = None

    @property
    def found(self) -> bool:
        return self.path is not None

    def describe(self) -> str:
        if not self.found:
            return f"[{self.kind}] not found"
        return f"[{self.kind}] {self.path}\n{self.content}"


@dataclass
class ProjectContext:
    root: Path
    entries: dict[str, ContextEntry] = field(default_factory=dict)
    routes: list[ContextEntry] = field(default_factory=list)
    composition: ContextEntry | None = None

    def describe(self) -> str:
        """Context text: one '---'-separated section per kind, routes, composition."""
        sections = [entry.describe() for entry in self.entries.values()]
        sections.extend(entry.describe() for entry in self.routes)
        if self.composition is not None:
            sections.append(self.composition.describe())
        return "".join(f"\n---\n{section}" for section in sections)

    def content_of(self, kind: str) -> str | None:
        entry = self.entries.get(kind)
        return entry.content if entry else None

    @property
    def existing_schema(self) -> str | None:
        return self.content_of("schema")

    @property
    def composition_text(self) -> str | None:
        return self.composition.content if self.composition else None

    def effective_layout(self, layout: LayoutConfig) -> LayoutConfig:
        """Layout with each configured path replaced by where the file was found."""
        updates = {
            _LAYOUT_FIELDS[kind]: entry.path
            for kind, entry in self.entries.items()
            if entry.found and entry.path != getattr(layout, _LAYOUT_FIELDS[kind])
        }
        composition = self.composition
        if composition is not None and composition.found and composition.path != layout.composition_path:
            updates["composition_path"] = composition.path
        for name, path in updates.items():
            logger.info(f"Using {path} for {name}")
        return layout.model_copy(update=updates) if updates else layout


def _read(root: Path, relative: str) -> str | None:
    path = root / relative
    if not path.is_file():
        return None
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read {relative}: {e}")
        return None


def _candidates(kind: str, layout: LayoutConfig) -> list[str]:
    configured = getattr(layout, _LAYOUT_FIELDS[kind])
    return list(dict.fromkeys([configured, *CANDIDATE_PATHS[kind]]))


def gather_project_context(root: str | Path, layout: LayoutConfig | None = None) -> ProjectContext:
    """
    Read the project files the synthesis pipeline depends on.

    Args:
        root: Project root directory
        layout: Project layout (its configured paths are tried first)

    Returns:
        ProjectContext with one entry per kind, found or not
    """
    layout = layout or LayoutConfig()
    root = Path(root)
    context = ProjectContext(root=root)

    for kind in CANDIDATE_PATHS:
        entry = ContextEntry(kind=kind)
        for candidate in _candidates(kind, layout):
            content = _read(root, candidate)
            if content is not None:
                entry = ContextEntry(kind=kind, path=candidate, content=content)
                break
        logger.debug(f"Context {kind}: {entry.path or 'not found'}")
        context.entries[kind] = entry

    routes_dir = root / layout.routes_dir
    if routes_dir.is_dir():
        for route_file in sorted(routes_dir.glob("*/route.ts")):
            relative = route_file.relative_to(root).as_posix()
            content = _read(root, relative)
            if content is not None:
                context.routes.append(ContextEntry(kind="route", path=relative, content=content))

    context.composition = ContextEntry(kind="composition")
    for candidate in dict.fromkeys([layout.composition_path, *COMPOSITION_CANDIDATES]):
        content = _read(root, candidate)
        if content is not None:
            context.composition = ContextEntry(kind="composition", path=candidate, content=content)
            break
    logger.debug(f"Context composition: {context.composition.path or 'not found'}")

    found = sum(1 for e in context.entries.values() if e.found)
    logger.info(f"Gathered project context: {found}/{len(context.entries)} files, {len(context.routes)} routes")
    return context
