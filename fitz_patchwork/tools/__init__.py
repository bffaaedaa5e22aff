# fitz_patchwork/tools/__init__.py
"""Service layer the CLI wraps."""

from .apply_plan import apply_plan
from .build_plan import PlanBuild, build_messages, build_plan

__all__ = ["PlanBuild", "build_messages", "build_plan", "apply_plan"]
