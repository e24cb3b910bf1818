"""Helpers shared by the CLI commands."""

from __future__ import annotations

from datetime import UTC, date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

from rich.markup import escape

from changelog_manager.config import load_config
from changelog_manager.core.document import new_changelog
from changelog_manager.core.release import prepare_release
from changelog_manager.core.version import Version
from changelog_manager.exceptions import ChangelogManagerError, InvalidFragmentError
from changelog_manager.project.filesystem import LocalFileSystem
from changelog_manager.project.pyproject import get_pyproject_version

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rich.console import Console

    from changelog_manager.config.models import ChangelogManagerConfig
    from changelog_manager.core.fragments import InvalidFragment
    from changelog_manager.core.release import ReleaseResult


def fail(err_console: Console, message: str, error: Exception | None = None) -> NoReturn:
    """Print an error and exit with status 1."""
    err_console.print(f"[red]{message}[/] {escape(str(error))}" if error else f"[red]{message}[/]")
    raise SystemExit(1) from error


def load_project(path: str | None, err_console: Console) -> tuple[Path, ChangelogManagerConfig]:
    project_path = Path(path) if path else Path.cwd()
    try:
        config = load_config(project_path)
    except ChangelogManagerError as e:
        fail(err_console, "Error loading config:", e)
    return project_path, config


def get_current_version(
    project_path: Path,
    override: str | None,
    err_console: Console,
) -> Version:
    try:
        return Version.parse(override or get_pyproject_version(project_path))
    except ChangelogManagerError as e:
        fail(err_console, "Error getting version:", e)


def parse_release_date(value: str | None, err_console: Console) -> date:
    if value is None:
        return datetime.now(UTC).date()
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        fail(err_console, "Invalid date, expected YYYY-MM-DD:", e)


def print_invalid_fragments(errors: Sequence[InvalidFragment], err_console: Console) -> None:
    err_console.print(f"[red]Found {len(errors)} invalid fragment(s):[/]")
    for invalid in errors:
        err_console.print(
            f"  [red]✗[/] [cyan]{escape(invalid.source_file)}[/]: {escape(invalid.message)}"
        )


def compute_release(
    project_path: Path,
    config: ChangelogManagerConfig,
    current_version: Version,
    release_date: date,
    *,
    pre_release: str | None,
    version_override: str | None,
    err_console: Console,
) -> tuple[LocalFileSystem, ReleaseResult]:
    """Run the release pipeline against the project on disk, without writing."""
    fs = LocalFileSystem(project_path)
    document = fs.read_changelog(config.changelog_path)
    if document is None:
        document = new_changelog()

    try:
        override = Version.parse(version_override) if version_override else None
        result = prepare_release(
            fs,
            str(config.fragments_dir),
            document,
            current_version,
            release_date,
            extension=config.fragment_extension,
            allow_invalid=config.allow_invalid_fragments,
            pre_release=pre_release or config.pre_release,
            version_override=override,
        )
    except InvalidFragmentError as e:
        print_invalid_fragments(e.errors, err_console)
        raise SystemExit(1) from e
    except ChangelogManagerError as e:
        fail(err_console, "Error:", e)

    return fs, result
