# fitz_patchwork/cli.py
"""
CLI interface for fitz-patchwork.

Thin presentation layer over the tools/ service layer.
"""

import asyncio
import logging
import sys

import typer

app = typer.Typer(
    name="fitz-patchwork",
    help="Generate database features (schema, routes, UI) into a Next.js + Drizzle project.",
    no_args_is_help=True,
)

_LEVELS = {"quiet": logging.WARNING, "normal": logging.INFO, "verbose": logging.DEBUG}

QUERY_PROMPT = "What database feature would you like to implement?"


def _run(coro):
    """Run async function from sync CLI context."""
    return asyncio.run(coro)


def _setup_logging(verbosity: str = "normal", verbose: bool = False) -> None:
    """Human-readable logging to stderr."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s  %(levelname)-7s  %(message)s", datefmt="%H:%M:%S"))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else _LEVELS.get(verbosity, logging.INFO))
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


@app.command()
def apply(
    query: list[str] = typer.Argument(None, help="Feature request, e.g. track 'listening history'"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Write every file without asking"),
    project_dir: str = typer.Option(".", "--project-dir", "-p", help="Project root"),
    response_file: str = typer.Option(
        None, "--response-file", "-r", help="Replay a saved model response instead of calling the model"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the plan without writing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Generate the files for a feature request, preview them, and write them."""
    from pathlib import Path

    from rich.console import Console

    from fitz_patchwork.config.loader import load_config
    from fitz_patchwork.errors import ExtractionMissError, PatchworkError
    from fitz_patchwork.tools.apply_plan import apply_plan
    from fitz_patchwork.tools.build_plan import build_plan

    config = load_config(project_dir=project_dir)
    _setup_logging(config.output.verbosity, verbose)
    console = Console()

    text = " ".join(query or []).strip()
    if not text:
        text = typer.prompt(QUERY_PROMPT)

    response_text = None
    if response_file:
        try:
            response_text = Path(response_file).read_text(encoding="utf-8")
        except OSError as e:
            typer.echo(f"Error: cannot read response file: {e}", err=True)
            raise typer.Exit(1)

    try:
        build = _run(build_plan(text, project_dir, config, response_text=response_text))
    except ExtractionMissError as e:
        console.print(f"[yellow]{e}.[/yellow] Raw response follows:\n")
        console.print(e.raw_response, markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(2)
    except PatchworkError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        typer.echo("\nCancelled.", err=True)
        raise typer.Exit(130)

    summary = build.summary()
    if summary["features"]:
        features = ", ".join(f["route_name"] for f in summary["features"])
        console.print(f"[dim]Features:[/dim] {features}")
    console.print(
        f"[dim]Plan:[/dim] {len(summary['files'])} files "
        f"({summary['extracted']} from model, {summary['synthesized']} scaffolded)"
    )

    try:
        result = apply_plan(build, auto_accept=yes or config.output.auto_accept, dry_run=dry_run, console=console)
    except (KeyboardInterrupt, typer.Abort):
        typer.echo("\nCancelled.", err=True)
        raise typer.Exit(130)

    if result["failed"]:
        for path, error in result["failed"].items():
            console.print(f"[red]✗[/red] {path}: {error}")
        raise typer.Exit(1)
    if not dry_run:
        console.print(f"\n[green]✓ Done[/green]  written: {len(result['written'])}  skipped: {len(result['skipped'])}")


@app.command()
def context(
    project_dir: str = typer.Option(".", "--project-dir", "-p", help="Project root"),
):
    """Show which context files were found in the project."""
    from fitz_patchwork.config.loader import load_config
    from fitz_patchwork.errors import InvalidInputError
    from fitz_patchwork.project.context import gather_project_context
    from fitz_patchwork.validation.sanitize import sanitize_project_path

    config = load_config(project_dir=project_dir)
    _setup_logging(config.output.verbosity)
    try:
        root = sanitize_project_path(project_dir)
    except InvalidInputError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    gathered = gather_project_context(root, config.layout)
    for kind, entry in gathered.entries.items():
        if entry.found:
            typer.echo(f"{kind:<12} " + typer.style(entry.path, fg=typer.colors.GREEN))
        else:
            typer.echo(f"{kind:<12} " + typer.style("not found", fg=typer.colors.RED))
    for entry in gathered.routes:
        typer.echo(f"{'route':<12} {entry.path}")
    composition = gathered.composition
    if composition is not None and composition.found:
        typer.echo(f"{'composition':<12} " + typer.style(composition.path, fg=typer.colors.GREEN))
    else:
        typer.echo(f"{'composition':<12} " + typer.style("not found", fg=typer.colors.RED))


@app.command()
def features(
    query: list[str] = typer.Argument(..., help="Feature request to analyze"),
):
    """Show the routes and table symbols a query resolves to."""
    from fitz_patchwork.synthesis.routes import resolve_route_set

    resolved = resolve_route_set(" ".join(query))
    if not resolved:
        typer.echo("No specific features detected.")
        return

    typer.echo(f"{'ROUTE':<28} SYMBOL")
    typer.echo("-" * 50)
    for feature in resolved:
        typer.echo(f"{feature.route_name:<28} {feature.symbol_name}")


if __name__ == "__main__":
    app()
