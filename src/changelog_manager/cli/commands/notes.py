"""Implementation of the 'notes' and 'next-version' commands.

Both print a single value to stdout so CI scripts can capture it, and
neither modifies any file.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from changelog_manager.cli.commands.common import (
    compute_release,
    get_current_version,
    load_project,
    parse_release_date,
)

if TYPE_CHECKING:
    from rich.console import Console


def run_notes(
    path: str | None,
    version_override: str | None,
    current_version: str | None,
    release_date: str | None,
    pre_release: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Print the plain-text release notes of the pending fragments."""
    project_path, config = load_project(path, err_console)
    current = get_current_version(project_path, current_version, err_console)
    date = parse_release_date(release_date, err_console)

    _, result = compute_release(
        project_path,
        config,
        current,
        date,
        pre_release=pre_release,
        version_override=version_override,
        err_console=err_console,
    )
    console.out(result.release_notes, end="", highlight=False)


def run_next_version(
    path: str | None,
    current_version: str | None,
    pre_release: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Print the version the pending fragments resolve to."""
    project_path, config = load_project(path, err_console)
    current = get_current_version(project_path, current_version, err_console)

    _, result = compute_release(
        project_path,
        config,
        current,
        parse_release_date(None, err_console),
        pre_release=pre_release,
        version_override=None,
        err_console=err_console,
    )
    console.out(str(result.version), highlight=False)
