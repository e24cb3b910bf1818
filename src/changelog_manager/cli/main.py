"""Command-line interface for changelog-manager."""

from __future__ import annotations

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from changelog_manager import __version__
from changelog_manager.cli.commands.check import run_check
from changelog_manager.cli.commands.create import run_create
from changelog_manager.cli.commands.merge import run_merge
from changelog_manager.cli.commands.notes import run_next_version, run_notes
from changelog_manager.core.fragments import Category

app = typer.Typer(
    name="changelog-manager",
    help="Build a Keep-a-Changelog CHANGELOG.md from per-change fragment files.",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

PathOption = Annotated[
    str | None,
    typer.Option("--path", "-p", help="Project directory (default: current directory)"),
]
CurrentVersionOption = Annotated[
    str | None,
    typer.Option("--current-version", help="Current version (default: read from pyproject.toml)"),
]
DateOption = Annotated[
    str | None,
    typer.Option("--date", "-d", help="Release date as YYYY-MM-DD (default: today, UTC)"),
]
PreReleaseOption = Annotated[
    str | None,
    typer.Option("--pre-release", help="Pre-release identifier (e.g. 'rc.1')"),
]
VersionOption = Annotated[
    str | None,
    typer.Option("--version", "-v", help="Release this version instead of computing one"),
]


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"changelog-manager {__version__}")
        raise typer.Exit


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", help="Show debug logging")] = False,
    show_version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the changelog-manager version and exit",
        ),
    ] = False,
) -> None:
    """Build a Keep-a-Changelog CHANGELOG.md from per-change fragment files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


@app.command()
def create(
    category: Annotated[
        Category,
        typer.Option("--category", "-c", case_sensitive=False, help="Change category"),
    ],
    summary: Annotated[str, typer.Option("--summary", "-s", help="One-line summary")],
    reference: Annotated[
        str | None,
        typer.Option("--reference", "-r", help="Issue or merge request URL"),
    ] = None,
    author: Annotated[
        str | None,
        typer.Option("--author", "-a", help="Author (default: git user.name)"),
    ] = None,
    description: Annotated[
        str | None,
        typer.Option("--description", help="Longer description or migration note"),
    ] = None,
    breaking: Annotated[
        bool,
        typer.Option("--breaking", "-b", help="Mark the change as breaking"),
    ] = False,
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="Fragment file name (default: current git branch)"),
    ] = None,
    path: PathOption = None,
) -> None:
    """Create a new changelog fragment."""
    run_create(
        path=path,
        category=category,
        summary=summary,
        reference=reference,
        author=author,
        description=description,
        breaking=breaking,
        name=name,
        console=console,
        err_console=err_console,
    )


@app.command()
def check(path: PathOption = None) -> None:
    """Validate every fragment file."""
    run_check(path=path, console=console, err_console=err_console)


@app.command()
def merge(
    execute: Annotated[
        bool,
        typer.Option("--execute", "-x", help="Apply changes (default is a dry run)"),
    ] = False,
    version: VersionOption = None,
    current_version: CurrentVersionOption = None,
    release_date: DateOption = None,
    pre_release: PreReleaseOption = None,
    notes_file: Annotated[
        str | None,
        typer.Option("--notes-file", help="Also write the plain-text release notes to this file"),
    ] = None,
    path: PathOption = None,
) -> None:
    """Merge all fragments into the changelog as a new release."""
    run_merge(
        path=path,
        execute=execute,
        version_override=version,
        current_version=current_version,
        release_date=release_date,
        pre_release=pre_release,
        notes_file=notes_file,
        console=console,
        err_console=err_console,
    )


@app.command()
def notes(
    version: VersionOption = None,
    current_version: CurrentVersionOption = None,
    release_date: DateOption = None,
    pre_release: PreReleaseOption = None,
    path: PathOption = None,
) -> None:
    """Print the plain-text release notes for the pending fragments."""
    run_notes(
        path=path,
        version_override=version,
        current_version=current_version,
        release_date=release_date,
        pre_release=pre_release,
        console=console,
        err_console=err_console,
    )


@app.command("next-version")
def next_version(
    current_version: CurrentVersionOption = None,
    pre_release: PreReleaseOption = None,
    path: PathOption = None,
) -> None:
    """Print the version the pending fragments would be released as."""
    run_next_version(
        path=path,
        current_version=current_version,
        pre_release=pre_release,
        console=console,
        err_console=err_console,
    )


if __name__ == "__main__":
    app()
