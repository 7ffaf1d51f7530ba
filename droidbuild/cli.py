"""Thin CLI wrapper for droidbuild.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules. Fatal conditions raised
by the core (missing output directory, no artifact) terminate with exit
status 2; every other error exits with status 1.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from droidbuild import __version__
from droidbuild.config import get_settings, print_settings_json
from droidbuild.errors import DroidBuildError, FatalBuildError
from droidbuild.options import OPTION_HELP
from droidbuild.types import BuildType

app = typer.Typer(
    name="droidbuild",
    help="droidbuild - build Android projects with ant or gradle and stage the APKs",
    no_args_is_help=True,
)
console = Console()

BUILD_OPTIONS_HELP = "\n\n".join(f"{flag}: {text}" for flag, text in OPTION_HELP.items())

PASSTHROUGH_CONTEXT = {"ignore_unknown_options": True, "allow_extra_args": True}

ProjectOption = Annotated[
    Path | None,
    typer.Option(
        "--project",
        "-C",
        help="Project root (defaults to DROIDBUILD_PROJECT_ROOT or the cwd)",
    ),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Output as JSON"),
]


def configure_logging(level: str) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def fail(error: DroidBuildError) -> typer.Exit:
    """Report an error and build the matching Exit."""
    console.print(f"[red]ERROR : {escape(error.message)}[/red]")
    if isinstance(error, FatalBuildError):
        return typer.Exit(code=error.exit_status)
    return typer.Exit(code=1)


def print_json(data: object) -> None:
    console.print(json.dumps(data, indent=2), soft_wrap=True, markup=False)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"droidbuild version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """droidbuild - build Android projects with ant or gradle and stage the APKs.

    Only one droidbuild process may work on a project at a time.
    """
    try:
        settings = get_settings()
    except DroidBuildError as e:
        raise fail(e) from None
    configure_logging(settings.log_level)


@app.command(
    context_settings=PASSTHROUGH_CONTEXT,
    help=f"Build the project and copy the APKs into out/.\n\n{BUILD_OPTIONS_HELP}",
)
def build(
    tokens: Annotated[
        list[str] | None,
        typer.Argument(help="Build options, e.g. --release --gradle", metavar="[BUILD_OPTIONS]..."),
    ] = None,
    project: ProjectOption = None,
    json_output: JsonOption = False,
) -> None:
    from droidbuild.builds.service import run_build

    try:
        artifacts = run_build(list(tokens or []), project_root=project)
    except DroidBuildError as e:
        raise fail(e) from None

    if json_output:
        print_json({"artifacts": [str(a) for a in artifacts]})
        return

    if not artifacts:
        console.print("[yellow]Build skipped, no artifacts copied[/yellow]")
        return
    console.print(f"[bold]Copied {len(artifacts)} artifact(s):[/bold]")
    for artifact in artifacts:
        console.print(f"  [green]{escape(str(artifact))}[/green]")


@app.command(
    context_settings=PASSTHROUGH_CONTEXT,
    help=f"Clean the project and remove out/.\n\n{BUILD_OPTIONS_HELP}",
)
def clean(
    tokens: Annotated[
        list[str] | None,
        typer.Argument(help="Build options selecting the backend", metavar="[BUILD_OPTIONS]..."),
    ] = None,
    project: ProjectOption = None,
) -> None:
    from droidbuild.builds.service import run_clean

    try:
        run_clean(list(tokens or []), project_root=project)
    except DroidBuildError as e:
        raise fail(e) from None
    console.print("[green]Project cleaned[/green]")


@app.command()
def arch(
    target: Annotated[
        str | None,
        typer.Option("--target", "-t", help="Device serial (adb -s)"),
    ] = None,
) -> None:
    """Detect the CPU architecture of an attached device."""
    from droidbuild.device import detect_architecture

    try:
        console.print(detect_architecture(target))
    except DroidBuildError as e:
        raise fail(e) from None


@app.command()
def artifact(
    build_type: Annotated[
        BuildType | None,
        typer.Option(
            "--type",
            help="Expected build type; logged only, out/ holds just the last build",
        ),
    ] = None,
    architecture: Annotated[
        str | None,
        typer.Option("--arch", "-a", help="Only artifacts whose name contains this"),
    ] = None,
    project: ProjectOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show the staged APK the deploy step would install."""
    from droidbuild.builds.service import get_artifact

    try:
        path = get_artifact(
            project_root=project, build_type=build_type, architecture=architecture
        )
    except DroidBuildError as e:
        raise fail(e) from None

    if json_output:
        print_json({"artifact": str(path)})
    else:
        console.print(escape(str(path)), soft_wrap=True)


@app.command()
def config(
    json_output: JsonOption = False,
) -> None:
    """Show effective configuration."""
    try:
        settings = get_settings()
    except DroidBuildError as e:
        raise fail(e) from None
    if json_output:
        console.print(print_settings_json(settings), soft_wrap=True, markup=False)
        return

    sdk_display = str(settings.android_home) if settings.android_home else "(not set)"
    timeout_display = (
        str(settings.build_timeout) if settings.build_timeout else "(none)"
    )
    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]Paths:[/bold]")
    console.print(f"  Project root:        {escape(str(settings.project_root))}")
    console.print(f"  Android SDK:         {escape(sdk_display)}")
    console.print(f"  adb:                 {escape(settings.adb_path)}")
    console.print()
    console.print("[bold]Build:[/bold]")
    console.print(f"  Default backend:     {settings.backend.value}")
    console.print(f"  Multiple APKs:       {settings.multiple_apks}")
    console.print(f"  Build timeout:       {timeout_display}")
    console.print()
    console.print("[bold]Operational:[/bold]")
    console.print(f"  Log level:           {settings.log_level}")
