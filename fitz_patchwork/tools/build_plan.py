# fitz_patchwork/tools/build_plan.py
"""
build_plan tool implementation.

Gathers project context, asks the model for file edits (or replays a
saved response) and synthesizes the final plan.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from fitz_patchwork.config.schema import LayoutConfig, PatchworkConfig
from fitz_patchwork.errors import UpstreamError
from fitz_patchwork.llm import LLMClient, create_llm_client
from fitz_patchwork.models.responses import FeatureResponse, PlanSummaryResponse
from fitz_patchwork.project.context import ProjectContext, gather_project_context
from fitz_patchwork.prompts import load_prompt
from fitz_patchwork.synthesis.pipeline import PlanResult, PlanSynthesizer
from fitz_patchwork.synthesis.routes import resolve_route_set
from fitz_patchwork.synthesis.types import FeatureRequest
from fitz_patchwork.validation.sanitize import sanitize_project_path, sanitize_query

logger = logging.getLogger(__name__)


@dataclass
class PlanBuild:
    """Everything one build produced; the edits go to the executor."""

    query: str
    root: Path
    context: ProjectContext
    response_text: str
    plan: PlanResult

    def summary(self) -> dict:
        return PlanSummaryResponse(
            query=self.query,
            features=[FeatureResponse(route_name=f.route_name, symbol_name=f.symbol_name) for f in self.plan.features],
            files=self.plan.paths,
            extracted=self.plan.extracted,
            synthesized=self.plan.synthesized,
        ).model_dump()


def _format_features(features: list[FeatureRequest]) -> str:
    if not features:
        return "(none detected, infer from the query)"
    return "\n".join(f"- route: {f.route_name}, table symbol: {f.symbol_name}" for f in features)


def build_messages(query: str, context: ProjectContext, layout: LayoutConfig) -> list[dict]:
    """Chat messages for the generation call."""
    prompt = load_prompt("generate").format(
        context=context.describe(),
        query=query,
        features=_format_features(resolve_route_set(query)),
        schema_path=layout.schema_path,
        routes_dir=layout.routes_dir,
        components_dir=layout.components_dir,
    )
    return [{"role": "user", "content": prompt}]


async def build_plan(
    query: str,
    project_dir: str | Path,
    config: PatchworkConfig,
    client: LLMClient | None = None,
    response_text: str | None = None,
) -> PlanBuild:
    """
    Build the write plan for a query.

    Args:
        query: Natural-language feature request
        project_dir: Project root
        config: Loaded configuration
        client: LLM client (created from config when None)
        response_text: Saved model response to replay instead of calling the model

    Returns:
        PlanBuild with the final edits

    Raises:
        InvalidInputError: If the query or project path is invalid
        UpstreamError: If the provider fails its health check or the model call fails
        ExtractionMissError: If the response holds no file/code pairs
    """
    cleaned_query = sanitize_query(query)
    root = sanitize_project_path(project_dir)

    context = gather_project_context(root, config.layout)
    layout = context.effective_layout(config.layout)

    if response_text is None:
        client = client or create_llm_client(config)
        if not await client.health_check():
            raise UpstreamError(f"LLM health check failed: {config.provider} server not available or not configured")
        messages = build_messages(cleaned_query, context, layout)
        response_text = await client.generate(messages)
    else:
        logger.info(f"Replaying saved response ({len(response_text)} chars)")
    logger.debug(f"Raw model response:\n{response_text}")

    synthesizer = PlanSynthesizer(
        layout=layout,
        context_description=context.describe(),
        existing_schema=context.existing_schema,
        composition_text=context.composition_text,
    )
    plan = synthesizer.synthesize(cleaned_query, response_text)
    return PlanBuild(query=cleaned_query, root=root, context=context, response_text=response_text, plan=plan)
