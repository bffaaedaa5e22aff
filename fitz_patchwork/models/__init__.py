# fitz_patchwork/models/__init__.py
"""Response models shared by the tools layer and the CLI."""

from .responses import ApplyPlanResponse, FeatureResponse, PlanSummaryResponse

__all__ = ["FeatureResponse", "PlanSummaryResponse", "ApplyPlanResponse"]
