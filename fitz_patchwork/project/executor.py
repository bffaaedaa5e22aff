# fitz_patchwork/project/executor.py
"""
Plan executor: show the plan, confirm, write.

The whole transcript is printed before the first write. Files are then
written one at a time in plan order; a failure on one file is logged and
the loop moves on to the next.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from fitz_patchwork.errors import InvalidInputError
from fitz_patchwork.synthesis.types import FileEdit
from fitz_patchwork.validation.sanitize import sanitize_edit_path

logger = logging.getLogger(__name__)

BANNER = "=" * 60


@dataclass
class ExecutionReport:
    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class PlanExecutor:
    """
    Writes a plan of FileEdits under a project root.

    Args:
        root: Project root directory
        console: Console for the transcript (stdout by default)
        auto_accept: Write without asking
        dry_run: Print the transcript only
    """

    def __init__(
        self,
        root: str | Path,
        console: Console | None = None,
        auto_accept: bool = False,
        dry_run: bool = False,
    ):
        self.root = Path(root).resolve()
        self.console = console or Console()
        self.auto_accept = auto_accept
        self.dry_run = dry_run

    def print_transcript(self, edits: list[FileEdit]) -> None:
        for edit in edits:
            self.console.print(f"\n[bold cyan]--- Preview of code to be written to {escape(edit.path)} ---[/bold cyan]")
            self.console.print(BANNER, style="dim")
            self.console.print(edit.content, markup=False, highlight=False, soft_wrap=True, end="" if edit.content.endswith("\n") else "\n")
            self.console.print(BANNER, style="dim")

    def confirm(self, edit: FileEdit) -> bool:
        if self.auto_accept:
            return True
        return typer.confirm(f"Write {edit.path}?", default=False)

    def write(self, edit: FileEdit) -> Path:
        target = sanitize_edit_path(self.root, edit.path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(edit.content, encoding="utf-8")
        return target

    def execute(self, edits: list[FileEdit]) -> ExecutionReport:
        """
        Print the plan, then confirm and write each edit in order.

        Returns:
            ExecutionReport of written, skipped and failed paths
        """
        report = ExecutionReport()
        self.print_transcript(edits)

        if self.dry_run:
            self.console.print(f"\n[yellow]Dry run: {len(edits)} files not written.[/yellow]")
            report.skipped.extend(edit.path for edit in edits)
            return report

        for edit in edits:
            if not self.confirm(edit):
                self.console.print(f"Aborted. {escape(edit.path)} was not changed.")
                logger.info(f"Skipped {edit.path}")
                report.skipped.append(edit.path)
                continue
            try:
                target = self.write(edit)
            except (OSError, InvalidInputError) as e:
                logger.error(f"Failed to write {edit.path}: {e}")
                report.failed[edit.path] = str(e)
                continue
            logger.info(f"Wrote {target}")
            self.console.print(f"[green]✓[/green] {escape(edit.path)}")
            report.written.append(edit.path)

        return report
