# fitz_patchwork/models/responses.py
"""
Pydantic response models for tool outputs.

Tools return these as plain dicts (model_dump()) so the CLI only formats.
"""

from pydantic import BaseModel, Field


class FeatureResponse(BaseModel):
    """One requested feature."""

    route_name: str = Field(description="kebab-case API route name")
    symbol_name: str = Field(description="camelCase schema table symbol")


class PlanSummaryResponse(BaseModel):
    """Summary of a synthesized plan."""

    query: str = Field(description="Sanitized user query")
    features: list[FeatureResponse] = Field(default_factory=list, description="Resolved features")
    files: list[str] = Field(default_factory=list, description="Planned paths in write order")
    extracted: int = Field(default=0, ge=0, description="Files recovered from the model response")
    synthesized: int = Field(default=0, ge=0, description="Scaffold files added")


class ApplyPlanResponse(BaseModel):
    """Response from apply_plan."""

    written: list[str] = Field(default_factory=list, description="Paths written")
    skipped: list[str] = Field(default_factory=list, description="Paths declined or not written")
    failed: dict[str, str] = Field(default_factory=dict, description="Path -> error for failed writes")
    dry_run: bool = Field(default=False, description="Whether writes were suppressed")
