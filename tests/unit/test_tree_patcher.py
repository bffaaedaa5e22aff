# tests/unit/test_tree_patcher.py
"""Tests for splicing new components into the composition file."""

import logging

import pytest

from fitz_patchwork.compose.patcher import (
    TreePatcher,
    component_name,
    import_reference,
    section_title,
)
from fitz_patchwork.config.schema import LayoutConfig
from fitz_patchwork.synthesis.types import FileEdit

LAYOUT = LayoutConfig()
COMPOSITION_PATH = LAYOUT.composition_path
TOP_TRACKS = FileEdit(
    path="src/components/top-tracks.tsx",
    content="export default function TopTracks() {\n  return <section />\n}\n",
)


class TestNaming:
    @pytest.mark.parametrize("path,name,title", [
        ("src/components/top-tracks.tsx", "TopTracks", "Top Tracks"),
        ("src/components/made-for-you.tsx", "MadeForYou", "Made For You"),
        ("src/components/RecentlyPlayed.jsx", "RecentlyPlayed", "Recently Played"),
    ])
    def test_component_name_and_title(self, path, name, title):
        assert component_name(path) == name
        assert section_title(name) == title

    def test_import_reference(self):
        assert import_reference("src/components/top-tracks.tsx", LAYOUT) == "@/components/top-tracks"
        assert import_reference("src/components/music/card.tsx", LAYOUT) == "@/components/music/card"


class TestLeafDetection:
    def test_leaf_component(self):
        assert TreePatcher().is_leaf_component(TOP_TRACKS)

    @pytest.mark.parametrize("path", [
        COMPOSITION_PATH,
        "src/app/page.tsx",
        "src/components/utils.ts",
        "src/db/schema.ts",
    ])
    def test_not_leaf(self, path):
        assert not TreePatcher().is_leaf_component(FileEdit(path=path, content=""))


class TestSplice:
    def test_import_and_reference_added(self, composition):
        patched = TreePatcher().splice(composition, TOP_TRACKS.path)
        assert patched.count('import TopTracks from "@/components/top-tracks"\n') == 1
        assert patched.count("<TopTracks />") == 1
        assert patched.rstrip().endswith("<TopTracks />\n    </div>\n  )\n}")

    def test_stale_section_replaced(self, composition):
        patched = TreePatcher().splice(composition, TOP_TRACKS.path)
        assert "Coming soon" not in patched
        assert "{/* Top Tracks */}" not in patched

    def test_import_matches_file_style(self):
        text = "import A from './a';\n\nexport default function X() {\n  return (\n    <div>\n      <A />\n    </div>\n  )\n}\n"
        patched = TreePatcher().splice(text, TOP_TRACKS.path)
        assert patched.startswith("import TopTracks from '@/components/top-tracks';\nimport A from './a';\n")

    def test_existing_import_and_element_not_duplicated(self, composition):
        once = TreePatcher().splice(composition, TOP_TRACKS.path)
        twice = TreePatcher().splice(once, TOP_TRACKS.path)
        assert twice == once

    def test_relative_import_counts(self):
        text = (
            'import TopTracks from "./top-tracks"\n\n'
            "export default function X() {\n  return <div>\n    <TopTracks />\n  </div>\n}\n"
        )
        assert TreePatcher().splice(text, TOP_TRACKS.path) == text


class TestPatchPlan:
    def test_composition_on_disk_adds_second_edit(self, composition):
        edits = TreePatcher().patch_plan([TOP_TRACKS], composition)
        assert [e.path for e in edits] == [TOP_TRACKS.path, COMPOSITION_PATH]
        assert "<TopTracks />" in edits[1].content
        assert edits[0] == TOP_TRACKS

    def test_skipped_without_composition(self, caplog):
        with caplog.at_level(logging.INFO):
            edits = TreePatcher().patch_plan([TOP_TRACKS], None)
        assert edits == [TOP_TRACKS]
        assert "Composition file not found" in caplog.text

    def test_planned_composition_is_updated_in_place(self, composition):
        planned = FileEdit(path=COMPOSITION_PATH, content=composition)
        edits = TreePatcher().patch_plan([planned, TOP_TRACKS], None)
        assert [e.path for e in edits] == [COMPOSITION_PATH, TOP_TRACKS.path]
        assert "<TopTracks />" in edits[0].content

    def test_several_components_accumulate(self, composition):
        other = FileEdit(path="src/components/liked-songs.tsx", content="export default function LikedSongs() {}\n")
        edits = TreePatcher().patch_plan([TOP_TRACKS, other], composition)
        patched = edits[-1].content
        assert patched.index("<TopTracks />") < patched.index("<LikedSongs />")
        assert len(edits) == 3

    def test_unparseable_composition_left_alone(self, caplog):
        broken = "export default function X() {\n  return <div><span></div>\n}\n"
        with caplog.at_level(logging.WARNING):
            edits = TreePatcher().patch_plan([TOP_TRACKS], broken)
        assert edits == [TOP_TRACKS]
        assert "Skipping composition update" in caplog.text

    def test_non_component_edits_ignored(self, composition):
        schema = FileEdit(path="src/db/schema.ts", content="export const a = 1;\n")
        assert TreePatcher().patch_plan([schema], composition) == [schema]
