# fitz_patchwork/synthesis/types.py
"""Value types passed between the synthesis stages."""

from dataclasses import dataclass
from enum import Enum
from typing import Literal


@dataclass
class FileEdit:
    """One file to be written: project-relative path plus full content."""

    path: str
    content: str


@dataclass(frozen=True)
class FeatureRequest:
    """A requested feature: its API route and its table symbol."""

    route_name: str  # kebab-case, e.g. "top-tracks"
    symbol_name: str  # camelCase, e.g. "topTracks"


@dataclass(frozen=True)
class DeclarationBlock:
    """One top-level exported declaration in the schema file."""

    name: str
    kind: Literal["value", "type"]
    raw_text: str

    @property
    def keyword(self) -> str:
        return "const" if self.kind == "value" else "type"


class ScaffoldKind(str, Enum):
    CONNECTION = "connection-bootstrap"
    SCHEMA_SYNC = "schema-sync"
    SEED_DATA = "seed-data"
    ROUTE_HANDLER = "route-handler"


@dataclass(frozen=True)
class ScaffoldRequirement:
    """A supporting file the plan must contain; route handlers carry their feature."""

    kind: ScaffoldKind
    feature: FeatureRequest | None = None
