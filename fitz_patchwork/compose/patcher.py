# fitz_patchwork/compose/patcher.py
"""
Splice new leaf components into the composition file.

For every new component file under the components directory the
composition file gains an import of it, loses any stale section titled
after it, and renders it as the last child of its root markup. The
rewritten composition file is one more FileEdit in the plan.
"""

import logging
import re
from pathlib import PurePosixPath

from fitz_patchwork.config.schema import LayoutConfig
from fitz_patchwork.errors import ComposeParseError
from fitz_patchwork.synthesis.identifiers import pascal_case
from fitz_patchwork.synthesis.paths import normalize_path, same_path
from fitz_patchwork.synthesis.types import FileEdit

from .tree import ComponentSource, Element

logger = logging.getLogger(__name__)

_COMPONENT_SUFFIXES = (".tsx", ".jsx")


def component_name(path: str) -> str:
    """'src/components/top-tracks.tsx' -> 'TopTracks'."""
    return pascal_case(PurePosixPath(path).stem)


def section_title(name: str) -> str:
    """'TopTracks' -> 'Top Tracks'."""
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", " ", name)


def import_reference(path: str, layout: LayoutConfig) -> str:
    """Aliased module reference for a component file, without extension."""
    resolved = PurePosixPath(path)
    root = layout.source_root.strip("/")
    parts = resolved.with_suffix("").parts
    if parts and parts[0] == root:
        parts = parts[1:]
    return layout.alias_prefix + "/".join(parts)


def _import_style(source: ComponentSource) -> tuple[str, str]:
    """(quote, terminator) used by the file's existing imports."""
    existing = source.imports
    if not existing:
        return "'", ";"
    text = existing[-1].text
    quote = '"' if text.rstrip(";").rstrip().endswith('"') else "'"
    return quote, ";" if text.rstrip().endswith(";") else ""


class TreePatcher:
    """
    Rewrites the composition file for new leaf components.

    Args:
        layout: Project layout (components directory and composition path)
    """

    def __init__(self, layout: LayoutConfig | None = None):
        self.layout = layout or LayoutConfig()

    def is_leaf_component(self, edit: FileEdit) -> bool:
        if not edit.path.endswith(_COMPONENT_SUFFIXES):
            return False
        if same_path(edit.path, self.layout.composition_path, self.layout):
            return False
        components_key = normalize_path(self.layout.components_dir, self.layout).rstrip("/") + "/"
        return normalize_path(edit.path, self.layout).startswith(components_key)

    def references(self, component_path: str) -> tuple[str, ...]:
        """Module references that already count as importing the component."""
        aliased = import_reference(component_path, self.layout)
        refs = [aliased, aliased + PurePosixPath(component_path).suffix]
        composition_dir = PurePosixPath(self.layout.composition_path).parent
        component = PurePosixPath(component_path)
        if component.parent == composition_dir:
            refs.extend([f"./{component.stem}", f"./{component.name}"])
        return tuple(refs)

    def splice(self, composition: str, component_path: str) -> str:
        """
        Return composition text with the component imported and rendered.

        Raises:
            ComposeParseError: If the composition text cannot be parsed
        """
        source = ComponentSource.parse(composition)
        name = component_name(component_path)
        if not name:
            return composition

        if source.find_import(*self.references(component_path)) is None:
            quote, terminator = _import_style(source)
            reference = import_reference(component_path, self.layout)
            source.insert_import(f"import {name} from {quote}{reference}{quote}{terminator}")
            logger.debug(f"Added import of {name} to {self.layout.composition_path}")

        title = section_title(name)
        if source.remove_section(title):
            logger.info(f"Replaced stale '{title}' section in {self.layout.composition_path}")

        if source.has_element(name):
            logger.debug(f"{name} is already rendered, not appending")
        elif not source.append_to_root(Element.reference(name)):
            logger.warning(f"Root markup of {self.layout.composition_path} is self-closing, cannot append {name}")

        return source.serialize()

    def patch_plan(self, edits: list[FileEdit], composition_on_disk: str | None) -> list[FileEdit]:
        """
        Add or update the composition FileEdit for every new leaf component.

        Skipped entirely when the composition file exists neither in the plan
        nor on disk. A composition file that fails to parse is left as is.

        Args:
            edits: Plan so far (not modified)
            composition_on_disk: Current composition file text, None if absent

        Returns:
            New list of FileEdits
        """
        result = list(edits)
        target = next(
            (i for i, e in enumerate(result) if same_path(e.path, self.layout.composition_path, self.layout)),
            None,
        )
        current = result[target].content if target is not None else composition_on_disk
        if current is None:
            logger.info("Composition file not found, skipping component splicing")
            return result

        patched = current
        for edit in edits:
            if not self.is_leaf_component(edit):
                continue
            try:
                patched = self.splice(patched, edit.path)
            except ComposeParseError as e:
                logger.warning(f"Skipping composition update for {edit.path}: {e}")
                return result

        if patched == current:
            return result
        if target is not None:
            result[target] = FileEdit(path=result[target].path, content=patched)
        else:
            result.append(FileEdit(path=self.layout.composition_path, content=patched))
        logger.info(f"Composition file {self.layout.composition_path} updated")
        return result
