"""Implementation of the 'create' command.

The create command writes one new fragment file, named after the
current git branch unless a name is given.
"""

from __future__ import annotations

import re
import subprocess
from typing import TYPE_CHECKING

from pydantic import ValidationError
from rich.markup import escape

from changelog_manager.cli.commands.common import fail, load_project
from changelog_manager.core.fragments import Fragment, describe_validation_error
from changelog_manager.exceptions import ChangelogManagerError
from changelog_manager.project.filesystem import LocalFileSystem

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from changelog_manager.core.fragments import Category


def slugify(value: str) -> str:
    """Turn a branch name like 'feature/ABC-42_New thing' into 'feature-abc-42-new-thing'."""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def _git(project_path: Path, *args: str) -> str | None:
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            check=True,
            cwd=project_path,
        )
    except (FileNotFoundError, subprocess.CalledProcessError):
        return None
    return result.stdout.strip() or None


def run_create(
    path: str | None,
    category: Category,
    summary: str,
    reference: str | None,
    author: str | None,
    description: str | None,
    breaking: bool,
    name: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the create command.

    Args:
        path: Optional path to project directory
        category: Change category
        summary: One-line summary of the change
        reference: Issue or merge request URL
        author: Author name (default: git user.name)
        description: Longer description or migration note
        breaking: Whether the change is breaking
        name: Fragment file name without extension (default: git branch)
        console: Console for standard output
        err_console: Console for error output
    """
    project_path, config = load_project(path, err_console)

    try:
        fragment = Fragment(
            category=category,
            summary=summary,
            reference=reference,
            author=author or _git(project_path, "config", "--get", "user.name"),
            description=description,
            breaking=breaking,
        )
    except ValidationError as e:
        fail(err_console, f"Invalid fragment: {escape(describe_validation_error(e))}")

    stem = slugify(name or _git(project_path, "rev-parse", "--abbrev-ref", "HEAD") or "")
    if not stem:
        fail(err_console, "Could not determine a fragment name, pass one with --name.")

    filename = f"{stem}{config.fragment_extension}"
    try:
        written = LocalFileSystem(project_path).write_fragment(
            config.fragments_dir, filename, fragment.to_json()
        )
    except ChangelogManagerError as e:
        fail(err_console, "Error:", e)

    console.print(f"  [green]✓[/] Created {escape(str(written))}")
