# fitz_patchwork/project/__init__.py
"""Target project I/O: reading context and writing plans."""

from .context import ContextEntry, ProjectContext, gather_project_context
from .executor import ExecutionReport, PlanExecutor

__all__ = [
    "ContextEntry",
    "ProjectContext",
    "gather_project_context",
    "ExecutionReport",
    "PlanExecutor",
]
