# fitz_patchwork/compose/__init__.py
"""Composition file splicing: a minimal markup tree and the patcher built on it."""

from .patcher import TreePatcher, component_name, import_reference, section_title
from .tree import ComponentSource, Element

__all__ = [
    "ComponentSource",
    "Element",
    "TreePatcher",
    "component_name",
    "import_reference",
    "section_title",
]
