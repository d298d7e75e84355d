#!/usr/bin/env python3
"""
AppForge CLI - Main Entry Point

Usage:
    appforge generate "a todo app with reminders" --framework expo
    appforge projects
    appforge files todo-app
    appforge show todo-app src/App.tsx
    appforge validate todo-app
    appforge delete todo-app
    appforge serve --port 8000
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.prompt import Confirm
from rich.table import Table

from appforge import __version__
from appforge.core.config import settings
from appforge.core.exceptions import AppForgeError
from appforge.core.services import AppServices, build_services
from appforge.schemas.generation import (
    Framework,
    GenerationPhase,
    GenerationProgress,
    GenerationRequest,
    ProjectType,
    Styling,
)


console = Console()

PHASE_STYLES = {
    GenerationPhase.PLANNING: "cyan",
    GenerationPhase.EXECUTION: "blue",
    GenerationPhase.INTEGRATION: "magenta",
    GenerationPhase.COMPLETE: "green",
    GenerationPhase.ERROR: "red",
}


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog="appforge",
        description="AppForge - describe an app, get a generated React Native / Expo project",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--backend",
        choices=["native", "flat"],
        help=f"Storage backend (default: {settings.STORAGE_BACKEND})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    generate_parser = subparsers.add_parser("generate", help="Generate a project from a description")
    generate_parser.add_argument("description", help="What the app should do")
    generate_parser.add_argument(
        "--type", dest="project_type",
        choices=[t.value for t in ProjectType], default=ProjectType.APP.value,
    )
    generate_parser.add_argument(
        "--framework",
        choices=[f.value for f in Framework], default=Framework.EXPO.value,
    )
    generate_parser.add_argument(
        "--feature", dest="features", action="append",
        help="Feature to include (repeatable)",
    )
    generate_parser.add_argument("--styling", choices=[s.value for s in Styling])

    subparsers.add_parser("projects", help="List projects")

    files_parser = subparsers.add_parser("files", help="List a project's files")
    files_parser.add_argument("name")

    show_parser = subparsers.add_parser("show", help="Print a file")
    show_parser.add_argument("name")
    show_parser.add_argument("path")

    validate_parser = subparsers.add_parser("validate", help="Check a project can be previewed")
    validate_parser.add_argument("name")

    delete_parser = subparsers.add_parser("delete", help="Delete a project")
    delete_parser.add_argument("name")
    delete_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=settings.SERVER_HOST)
    serve_parser.add_argument("--port", type=int, default=settings.SERVER_PORT)

    return parser


class ProgressRenderer:
    """Render orchestrator progress snapshots with a rich progress bar"""

    def __init__(self, progress: Progress):
        self.progress = progress
        self.task_id = progress.add_task("Planning...", total=None)
        self.last_phase: Optional[GenerationPhase] = None

    def __call__(self, snapshot: GenerationProgress) -> None:
        if snapshot.phase != self.last_phase:
            style = PHASE_STYLES.get(snapshot.phase, "white")
            self.progress.console.print(f"[{style}]● {snapshot.phase.value}[/{style}] {snapshot.message}")
            self.last_phase = snapshot.phase
        elif snapshot.current_file:
            self.progress.console.print(f"  [dim]→ {snapshot.current_file}[/dim]")

        self.progress.update(
            self.task_id,
            description=snapshot.message,
            total=snapshot.total_files or None,
            completed=len(snapshot.completed_files),
        )


async def run_generate(services: AppServices, args: argparse.Namespace) -> int:
    request = GenerationRequest(
        description=args.description,
        project_type=args.project_type,
        framework=args.framework,
        features=args.features,
        styling=args.styling,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        services.orchestrator.set_progress_callback(ProgressRenderer(progress))
        result = await services.orchestrator.generate(request)

    console.print(Panel(
        f"[bold]{result.plan.name}[/bold]\n{result.plan.description}\n\n"
        f"Location: {result.project_root}\n"
        f"Files generated: {len(result.progress.completed_files)}",
        title="Project generated",
        border_style="green",
    ))
    return 0


async def run_projects(services: AppServices) -> int:
    projects = await services.file_store.list_projects()
    if not projects:
        console.print("[dim]No projects yet[/dim]")
        return 0

    table = Table(title=f"Projects ({services.file_store.base_dir})")
    table.add_column("Name", style="cyan")
    table.add_column("Modified")
    for name in projects:
        info = await services.file_store.get_project_info(name)
        modified = f"{info.modified_at:.0f}" if info else "-"
        table.add_row(name, modified)
    console.print(table)
    return 0


async def run_files(services: AppServices, name: str) -> int:
    root = services.file_store.project_root(name)
    entries = await services.file_store.list_files(root)

    table = Table(title=name)
    table.add_column("Path", style="cyan")
    table.add_column("Kind")
    table.add_column("Size", justify="right")
    for entry in entries:
        table.add_row(entry.path, entry.kind.value, str(entry.size) if entry.is_file else "")
    console.print(table)
    return 0


async def run_show(services: AppServices, name: str, path: str) -> int:
    root = services.file_store.project_root(name)
    console.print(await services.file_store.read_file(root, path), markup=False, highlight=False)
    return 0


async def run_validate(services: AppServices, name: str) -> int:
    root = services.file_store.project_root(name)
    await services.file_store.list_files(root)
    validation = await services.preview.validate_project(root)

    for error in validation.errors:
        console.print(f"[red]✗ {error}[/red]")
    for warning in validation.warnings:
        console.print(f"[yellow]! {warning}[/yellow]")
    if validation.is_valid:
        console.print("[green]✓ Project is ready for preview[/green]")
    return 0 if validation.is_valid else 1


async def run_delete(services: AppServices, name: str, assume_yes: bool) -> int:
    if not assume_yes and not Confirm.ask(f"Delete project [bold]{name}[/bold]?", console=console):
        console.print("[dim]Cancelled[/dim]")
        return 1
    await services.file_store.delete_project(name)
    console.print(f"[green]Deleted {name}[/green]")
    return 0


async def run_command(args: argparse.Namespace) -> int:
    config = settings
    if args.backend:
        config = settings.model_copy(update={"STORAGE_BACKEND": args.backend})

    services = build_services(config)
    try:
        if args.command == "generate":
            return await run_generate(services, args)
        if args.command == "projects":
            return await run_projects(services)
        if args.command == "files":
            return await run_files(services, args.name)
        if args.command == "show":
            return await run_show(services, args.name, args.path)
        if args.command == "validate":
            return await run_validate(services, args.name)
        if args.command == "delete":
            return await run_delete(services, args.name, args.yes)
        raise ValueError(f"Unknown command: {args.command}")
    finally:
        await services.aclose()


def run_server(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run("appforge.main:app", host=host, port=port, reload=settings.DEBUG)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "serve":
        return run_server(args.host, args.port)

    try:
        return asyncio.run(run_command(args))
    except AppForgeError as e:
        console.print(f"[red]Error ({e.code}):[/red] {e.message}")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
