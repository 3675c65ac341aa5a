"""
autoscaffold.cli - Command Line Interface
=========================================

This module provides the command-line interface for autoscaffold using Typer.

Architecture
------------
The CLI is structured around Typer's app pattern:

    app (main entry point)
    ├── watch    - Scaffold new empty files until interrupted
    ├── list     - Show the templates that would be loaded
    ├── match    - Explain which template a path resolves to
    ├── init     - Create a template folder and write [tool.autoscaffold]
    └── presets  - List built-in presets

Options given on the command line override ``[tool.autoscaffold]`` in the
project's pyproject.toml, which overrides the defaults.

Usage Examples
--------------
    $ autoscaffold watch
    $ autoscaffold watch ./frontend --preset vue --preset pinia
    $ autoscaffold match src/components/forms/Input.vue
    $ autoscaffold init --preset vue

See Also
--------
- session.py: What ``watch`` starts and stops
- patterns.py: Matching and specificity ranking
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from autoscaffold import __version__
from autoscaffold.errors import ScaffoldError
from autoscaffold.models import PresetName, ScaffoldOptions, load_options, write_tool_config
from autoscaffold.patterns import rank_candidates
from autoscaffold.presets import load_preset
from autoscaffold.session import ScaffoldSession, load_templates


# =============================================================================
# CLI Application Setup
# =============================================================================

app = typer.Typer(
    name="autoscaffold",
    help="Fill newly created empty files with boilerplate from a template tree.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Console for rich output
console = Console()


# =============================================================================
# Helpers
# =============================================================================

def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(Panel(
            f"[bold green]autoscaffold[/] version [cyan]{__version__}[/]\n\n"
            f"[dim]Live boilerplate for new empty files[/]",
            border_style="green",
        ))
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route library logging through Rich; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def resolve_options(
    root: Path,
    scaffold_dir: str | None = None,
    presets: list[str] | None = None,
) -> ScaffoldOptions:
    """
    Load options for ``root`` with command-line overrides applied.

    Exits with status 1 on invalid configuration.
    """
    try:
        return load_options(root, root_folder_name=scaffold_dir, presets=presets or None)
    except ScaffoldError as e:
        rprint(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)


def require_directory(root: Path) -> Path:
    """Resolve ``root`` or exit if it is not a directory."""
    if not root.is_dir():
        rprint(f"[red]Error:[/] Not a directory: {escape(str(root))}")
        raise typer.Exit(1)
    return root.resolve()


RootArgument = Annotated[
    Path,
    typer.Argument(help="Project root (default: current directory)"),
]
ScaffoldDirOption = Annotated[
    str | None,
    typer.Option(
        "--scaffold-dir",
        "-s",
        help="Template root folder name (default: .scaffold)",
    ),
]
PresetOption = Annotated[
    list[str] | None,
    typer.Option(
        "--preset",
        "-p",
        help="Built-in preset to enable; repeat for several, later ones win",
    ),
]


# =============================================================================
# Main Application Callback
# =============================================================================

@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    [bold]autoscaffold[/] - live boilerplate for new empty files.

    Put templates in a [cyan].scaffold/[/] folder that mirrors your project,
    using [cyan]\\[name][/] and [cyan]\\[...path][/] in file names, then run:

        autoscaffold watch
    """


# =============================================================================
# Watch Command
# =============================================================================

@app.command()
def watch(
    root: RootArgument = Path("."),
    scaffold_dir: ScaffoldDirOption = None,
    preset: PresetOption = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    Watch a project and scaffold new empty files until interrupted.

    [bold]Examples:[/]

        autoscaffold watch
        autoscaffold watch ./web --preset vue --preset pinia
    """
    configure_logging(verbose)
    project_root = require_directory(root)
    options = resolve_options(project_root, scaffold_dir, preset)

    if not options.enabled:
        console.print("[yellow]Scaffolding is disabled in \\[tool.autoscaffold][/]")
        return

    session = ScaffoldSession(project_root, options).start()
    watcher = session.watcher
    if watcher is None or not session.active:
        return

    watcher.wait_until_ready()
    watched = ", ".join(w.relative or "." for w in watcher.directories) or "nothing"
    console.print(
        f"[bold green]Watching[/] {escape(watched)} "
        f"[dim]({len(session.templates)} template(s), Ctrl+C to stop)[/]"
    )

    try:
        while session.active:
            time.sleep(0.5)
    except KeyboardInterrupt:
        console.print()
    finally:
        session.stop()


# =============================================================================
# List Command
# =============================================================================

@app.command("list")
def list_templates(
    root: RootArgument = Path("."),
    scaffold_dir: ScaffoldDirOption = None,
    preset: PresetOption = None,
) -> None:
    """Show every template that a session would load, in precedence order."""
    project_root = require_directory(root)
    options = resolve_options(project_root, scaffold_dir, preset)
    templates, sources = load_templates(project_root, options)

    if not templates:
        console.print(
            f"[yellow]No templates found.[/] Create templates in "
            f"[cyan]{escape(options.root_folder_name)}/[/] or enable a preset."
        )
        return

    table = Table(title="Templates")
    table.add_column("Scope", style="cyan")
    table.add_column("Pattern", style="green")
    table.add_column("Depth", justify="right")
    table.add_column("Origin", style="dim")

    for template in templates:
        table.add_row(
            escape(template.scope_prefix or "."),
            escape(template.source_path),
            str(template.scope_depth),
            template.origin,
        )

    console.print(table)
    console.print(f"[dim]{len(sources)} template root(s) discovered[/]")


# =============================================================================
# Match Command
# =============================================================================

@app.command()
def match(
    file: Annotated[
        str,
        typer.Argument(help="File path relative to the project root"),
    ],
    root: Annotated[
        Path,
        typer.Option("--root", "-r", help="Project root (default: current directory)"),
    ] = Path("."),
    scaffold_dir: ScaffoldDirOption = None,
    preset: PresetOption = None,
) -> None:
    """
    Show which templates match a path and which one wins.

    Exits with status 1 if nothing matches.
    """
    project_root = require_directory(root)
    options = resolve_options(project_root, scaffold_dir, preset)
    templates, _ = load_templates(project_root, options)

    candidates = rank_candidates(file, templates)
    if not candidates:
        console.print(f"[yellow]No template matches[/] {escape(file)}")
        raise typer.Exit(1)

    table = Table(title=f"Candidates for {escape(file)}")
    table.add_column("", width=1)
    table.add_column("Pattern", style="green")
    table.add_column("Captures")
    table.add_column("Specificity", style="dim")
    table.add_column("Origin", style="dim")

    for index, candidate in enumerate(candidates):
        captures = ", ".join(f"{k}={v}" for k, v in candidate.captures.items())
        table.add_row(
            "[bold green]✓[/]" if index == 0 else "",
            escape(candidate.template.display_path),
            escape(captures) or "[dim]-[/]",
            str(tuple(candidate.specificity)),
            candidate.template.origin,
        )

    console.print(table)


# =============================================================================
# Init Command
# =============================================================================

@app.command()
def init(
    root: RootArgument = Path("."),
    scaffold_dir: ScaffoldDirOption = None,
    preset: PresetOption = None,
) -> None:
    """
    Create the template root folder and record settings in pyproject.toml.

    [bold]Example:[/]

        autoscaffold init --preset vue --preset pinia
    """
    project_root = require_directory(root)
    options = resolve_options(project_root, scaffold_dir, preset)

    template_root = project_root / options.root_folder_name
    template_root.mkdir(exist_ok=True)

    try:
        pyproject_path = write_tool_config(project_root, options)
    except OSError as e:
        rprint(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"  Created {escape(options.root_folder_name)}/")
    console.print(f"  Updated {pyproject_path.name} [dim]\\[tool.autoscaffold][/]")
    console.print()
    console.print(
        "[bold]Next:[/] add templates mirroring your project, e.g. "
        f"[cyan]{escape(options.root_folder_name)}/src/components/\\[...path].vue[/]"
    )


# =============================================================================
# Presets Command
# =============================================================================

@app.command()
def presets() -> None:
    """List the built-in presets."""
    table = Table(title="Built-in Presets")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Templates", style="green")

    for name in PresetName:
        patterns = "\n".join(escape(t.source_path) for t in load_preset(name))
        table.add_row(name.value, name.description, patterns)

    console.print(table)
