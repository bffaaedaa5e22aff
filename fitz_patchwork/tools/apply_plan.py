# fitz_patchwork/tools/apply_plan.py
"""apply_plan tool implementation: hand a built plan to the executor."""

import logging

from rich.console import Console

from fitz_patchwork.models.responses import ApplyPlanResponse
from fitz_patchwork.project.executor import PlanExecutor

from .build_plan import PlanBuild

logger = logging.getLogger(__name__)


def apply_plan(
    build: PlanBuild,
    auto_accept: bool = False,
    dry_run: bool = False,
    console: Console | None = None,
) -> dict:
    """
    Preview and write a plan.

    Returns:
        ApplyPlanResponse as dict
    """
    executor = PlanExecutor(build.root, console=console, auto_accept=auto_accept, dry_run=dry_run)
    report = executor.execute(build.plan.edits)
    if report.failed:
        logger.warning(f"{len(report.failed)} of {len(build.plan.edits)} files failed to write")

    return ApplyPlanResponse(
        written=report.written,
        skipped=report.skipped,
        failed=report.failed,
        dry_run=dry_run,
    ).model_dump()
