# tests/unit/test_scaffold.py
"""Tests for scaffold synthesis."""

import pytest

from fitz_patchwork.synthesis.scaffold import (
    ScaffoldSynthesizer,
    load_template,
    required_scaffolds,
    sample_records,
)
from fitz_patchwork.synthesis.types import FeatureRequest, FileEdit, ScaffoldKind

TOP_TRACKS = FeatureRequest(route_name="top-tracks", symbol_name="topTracks")
HISTORY = FeatureRequest(route_name="listening-history", symbol_name="listeningHistory")

SCHEMA_EDIT = FileEdit(
    path="src/db/schema.ts",
    content=(
        "export const topTracks = sqliteTable('top_tracks', {\n"
        "  id: integer('id').primaryKey({ autoIncrement: true }),\n"
        "  title: text('title').notNull(),\n"
        "  plays: integer('plays').default(0),\n"
        "  createdAt: integer('created_at', { mode: 'timestamp' }),\n"
        "});\n"
    ),
)


def _by_path(edits: list[FileEdit]) -> dict[str, str]:
    return {e.path: e.content for e in edits}


class TestRequirements:
    def test_fixed_then_one_route_per_feature(self):
        kinds = [r.kind for r in required_scaffolds([TOP_TRACKS, HISTORY])]
        assert kinds == [
            ScaffoldKind.CONNECTION,
            ScaffoldKind.SCHEMA_SYNC,
            ScaffoldKind.SEED_DATA,
            ScaffoldKind.ROUTE_HANDLER,
            ScaffoldKind.ROUTE_HANDLER,
        ]

    def test_missing_template(self):
        with pytest.raises(FileNotFoundError):
            load_template("nope.ts")


class TestSampleRecords:
    def test_skips_keys_and_defaults(self):
        columns = [
            ("id", "integer", "'id').primaryKey()"),
            ("title", "text", "'title').notNull()"),
            ("plays", "integer", "'plays').default(0)"),
        ]
        assert sample_records(columns, count=2) == [
            "{ title: 'Sample title 1' }",
            "{ title: 'Sample title 2' }",
        ]

    def test_fallback_record(self):
        assert sample_records([], count=1) == ["{ name: 'Sample item 1' }"]


class TestSynthesize:
    def test_fills_every_missing_scaffold(self):
        edits = ScaffoldSynthesizer().synthesize([SCHEMA_EDIT], [TOP_TRACKS])
        files = _by_path(edits)
        assert list(files) == [
            "src/db/schema.ts",
            "src/db/connection.ts",
            "src/db/sync.ts",
            "src/db/seed.ts",
            "src/app/api/top-tracks/route.ts",
        ]
        assert "new Database(path.join(process.cwd(), 'sqlite.db'))" in files["src/db/connection.ts"]
        assert "await db.select().from(topTracks).limit(1);" in files["src/db/sync.ts"]
        assert "{ title: 'Sample title 1', createdAt: new Date() }," in files["src/db/seed.ts"]
        assert "await db.delete(topTracks);" in files["src/db/seed.ts"]

    def test_route_handler_template(self):
        edits = ScaffoldSynthesizer().synthesize([SCHEMA_EDIT], [TOP_TRACKS])
        route = _by_path(edits)["src/app/api/top-tracks/route.ts"]
        assert "import { topTracks } from '@/db/schema';" in route
        assert "export async function GET()" in route
        assert "export async function POST(request: Request)" in route
        assert "db.insert(topTracks).values(body).returning()" in route
        assert route.count("catch (error)") == 2

    def test_input_list_not_modified(self):
        edits = [SCHEMA_EDIT]
        ScaffoldSynthesizer().synthesize(edits, [TOP_TRACKS])
        assert edits == [SCHEMA_EDIT]

    def test_present_in_context_is_not_duplicated(self):
        description = (
            "\n---\n[connection] src/db/connection.ts\nexport const db = drizzle(sqlite);"
            "\n---\n[route] src/app/api/top-tracks/route.ts\nexport async function GET() {}"
        )
        edits = ScaffoldSynthesizer(context_description=description).synthesize([SCHEMA_EDIT], [TOP_TRACKS])
        paths = [e.path for e in edits]
        assert "src/db/connection.ts" not in paths
        assert "src/app/api/top-tracks/route.ts" not in paths
        assert "src/db/sync.ts" in paths

    def test_not_found_entries_do_not_count(self):
        description = "\n---\n[connection] not found"
        edits = ScaffoldSynthesizer(context_description=description).synthesize([SCHEMA_EDIT], [])
        assert "src/db/connection.ts" in [e.path for e in edits]

    def test_route_in_plan_matched_by_route_name(self):
        route = FileEdit(path="src/app/api/top-tracks/route.ts", content="export async function GET() {}\n")
        edits = ScaffoldSynthesizer().synthesize([SCHEMA_EDIT, route], [TOP_TRACKS, HISTORY])
        routes = [e.path for e in edits if e.path.endswith("route.ts")]
        assert routes == ["src/app/api/top-tracks/route.ts", "src/app/api/listening-history/route.ts"]

    def test_sync_and_seed_skipped_without_tables(self):
        edits = ScaffoldSynthesizer().synthesize([FileEdit("src/components/x.tsx", "x\n")], [])
        assert [e.path for e in edits] == ["src/components/x.tsx", "src/db/connection.ts"]

    def test_schema_on_disk_feeds_sync(self):
        existing = "export const madeForYou = sqliteTable('made_for_you', {});\n"
        edits = ScaffoldSynthesizer(existing_schema=existing).synthesize([SCHEMA_EDIT], [])
        sync = _by_path(edits)["src/db/sync.ts"]
        assert "import { madeForYou, topTracks } from './schema';" in sync
        seed = _by_path(edits)["src/db/seed.ts"]
        assert "db.delete(topTracks)" in seed

    def test_rerun_is_idempotent(self):
        first = ScaffoldSynthesizer().synthesize([SCHEMA_EDIT], [TOP_TRACKS])
        second = ScaffoldSynthesizer().synthesize(first, [TOP_TRACKS])
        assert second == first
