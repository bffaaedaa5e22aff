# tests/unit/test_build_plan.py
"""Tests for the build_plan and apply_plan tools."""

import io
from unittest.mock import AsyncMock

import pytest
from rich.console import Console

from fitz_patchwork.config.schema import PatchworkConfig
from fitz_patchwork.errors import ExtractionMissError, InvalidInputError, UpstreamError
from fitz_patchwork.project.context import gather_project_context
from fitz_patchwork.tools import apply_plan, build_plan
from fitz_patchwork.tools.build_plan import build_messages

QUERY = "I want to see my 'top tracks'"


def _client(response_text, healthy=True):
    client = AsyncMock()
    client.health_check = AsyncMock(return_value=healthy)
    client.generate = AsyncMock(return_value=response_text)
    return client


class TestBuildMessages:
    def test_prompt_carries_context_and_features(self, project):
        config = PatchworkConfig()
        context = gather_project_context(project, config.layout)
        messages = build_messages(QUERY, context, config.layout)

        assert len(messages) == 1
        prompt = messages[0]["content"]
        assert QUERY in prompt
        assert "route: top-tracks, table symbol: topTracks" in prompt
        assert "export const recentlyPlayed" in prompt
        assert "src/app/api" in prompt


class TestBuildPlan:
    @pytest.mark.asyncio
    async def test_builds_plan_from_model(self, project, model_response):
        client = _client(model_response)
        build = await build_plan(QUERY, project, PatchworkConfig(), client=client)

        client.generate.assert_awaited_once()
        assert build.plan.paths == [
            "src/db/schema.ts",
            "src/components/top-tracks.tsx",
            "src/db/sync.ts",
            "src/db/seed.ts",
            "src/app/api/top-tracks/route.ts",
            "src/components/main-content.tsx",
        ]
        summary = build.summary()
        assert summary["features"] == [{"route_name": "top-tracks", "symbol_name": "topTracks"}]
        assert summary["extracted"] == 2
        assert summary["synthesized"] == 3

    @pytest.mark.asyncio
    async def test_replay_skips_model(self, project, model_response):
        client = _client("unused")
        build = await build_plan(QUERY, project, PatchworkConfig(), client=client, response_text=model_response)
        client.generate.assert_not_awaited()
        assert build.response_text == model_response

    @pytest.mark.asyncio
    async def test_schema_keeps_existing_tables(self, project, model_response):
        build = await build_plan(QUERY, project, PatchworkConfig(), response_text=model_response)
        schema = build.plan.edits[0].content
        assert "export const recentlyPlayed" in schema
        assert "export const topTracks" in schema

    @pytest.mark.asyncio
    async def test_extraction_miss(self, project):
        with pytest.raises(ExtractionMissError):
            await build_plan(QUERY, project, PatchworkConfig(), client=_client("I cannot help with that."))

    @pytest.mark.asyncio
    async def test_upstream_error_propagates(self, project):
        client = _client("")
        client.generate = AsyncMock(side_effect=UpstreamError("Ollama request failed: down"))
        with pytest.raises(UpstreamError):
            await build_plan(QUERY, project, PatchworkConfig(), client=client)

    @pytest.mark.asyncio
    async def test_unhealthy_provider_stops_before_generation(self, project, model_response):
        client = _client(model_response, healthy=False)
        with pytest.raises(UpstreamError, match="health check failed"):
            await build_plan(QUERY, project, PatchworkConfig(), client=client)
        client.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_replay_skips_health_check(self, project, model_response):
        client = _client("unused", healthy=False)
        build = await build_plan(QUERY, project, PatchworkConfig(), client=client, response_text=model_response)
        client.health_check.assert_not_awaited()
        assert build.plan.extracted == 2

    @pytest.mark.asyncio
    async def test_invalid_project(self, tmp_path):
        with pytest.raises(InvalidInputError):
            await build_plan(QUERY, tmp_path / "missing", PatchworkConfig(), client=_client(""))


class TestApplyPlan:
    @pytest.mark.asyncio
    async def test_writes_plan(self, project, model_response):
        build = await build_plan(QUERY, project, PatchworkConfig(), response_text=model_response)
        console = Console(file=io.StringIO(), width=200)
        result = apply_plan(build, auto_accept=True, console=console)

        assert result["failed"] == {}
        assert result["dry_run"] is False
        assert len(result["written"]) == 6
        route = (project / "src/app/api/top-tracks/route.ts").read_text(encoding="utf-8")
        assert "topTracks" in route
        main = (project / "src/components/main-content.tsx").read_text(encoding="utf-8")
        assert 'import TopTracks from "@/components/top-tracks"' in main
        assert "<TopTracks />" in main

    @pytest.mark.asyncio
    async def test_dry_run(self, project, model_response):
        build = await build_plan(QUERY, project, PatchworkConfig(), response_text=model_response)
        result = apply_plan(build, dry_run=True, console=Console(file=io.StringIO()))
        assert result["written"] == []
        assert result["dry_run"] is True
        assert not (project / "src/db/seed.ts").exists()
