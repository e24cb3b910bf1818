"""Implementation of the 'merge' command.

The merge command turns the pending fragments into a new release
section of the changelog, bumps the project version and removes the
consumed fragments. Committing and tagging are left to the caller.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax

from changelog_manager.cli.commands.common import (
    compute_release,
    fail,
    get_current_version,
    load_project,
    parse_release_date,
)
from changelog_manager.exceptions import ChangelogManagerError

if TYPE_CHECKING:
    from rich.console import Console


def run_merge(
    path: str | None,
    execute: bool,
    version_override: str | None,
    current_version: str | None,
    release_date: str | None,
    pre_release: str | None,
    notes_file: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the merge command.

    Args:
        path: Optional path to project directory
        execute: Whether to actually apply changes
        version_override: Manual version override (e.g., "2.0.0")
        current_version: Current version override (default: from pyproject.toml)
        release_date: Release date as YYYY-MM-DD (default: today)
        pre_release: Pre-release identifier (e.g., "rc.1")
        notes_file: Where to write the plain-text release notes
        console: Console for standard output
        err_console: Console for error output
    """
    project_path, config = load_project(path, err_console)
    current = get_current_version(project_path, current_version, err_console)
    date = parse_release_date(release_date, err_console)

    fs, result = compute_release(
        project_path,
        config,
        current,
        date,
        pre_release=pre_release,
        version_override=version_override,
        err_console=err_console,
    )

    mode_str = "[green]EXECUTING[/]" if execute else "[yellow]DRY-RUN[/]"
    console.print(
        f"\n{mode_str} - Releasing [green]{result.version}[/] "
        f"(current [cyan]{result.previous_version}[/]) "
        f"from {len(result.consumed_files)} fragment(s)\n"
    )

    if not execute:
        console.print(Syntax(result.section, "markdown", word_wrap=True))
        changes = [f"  • Insert the section above into [cyan]{config.changelog_path}[/]"]
        if config.update_project_version and current_version is None:
            changes.append("  • Update version in [cyan]pyproject.toml[/]")
        if notes_file:
            changes.append(f"  • Write release notes to [cyan]{escape(notes_file)}[/]")
        if config.remove_fragments:
            changes.append(f"  • Remove fragments from [cyan]{config.fragments_dir}[/]")
        console.print(
            Panel(
                "[bold]Would make the following changes:[/]\n\n" + "\n".join(changes),
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    # The changelog goes first: a failed write must leave the version untouched
    try:
        fs.write_changelog(config.changelog_path, result.document)
        console.print(f"  [green]✓[/] Updated {config.changelog_path}")
    except ChangelogManagerError as e:
        fail(err_console, "Error writing changelog:", e)

    # The version comes from pyproject.toml unless given explicitly
    if config.update_project_version and current_version is None:
        from changelog_manager.project.pyproject import update_pyproject_version

        try:
            update_pyproject_version(project_path, str(result.version))
            console.print("  [green]✓[/] Updated version in pyproject.toml")
        except ChangelogManagerError as e:
            fail(err_console, "Error updating pyproject.toml:", e)

    if notes_file:
        notes_path = Path(notes_file)
        if not notes_path.is_absolute():
            notes_path = project_path / notes_path
        try:
            notes_path.write_text(result.release_notes, encoding="utf-8")
            console.print(f"  [green]✓[/] Wrote release notes to {escape(notes_file)}")
        except OSError as e:
            fail(err_console, "Error writing release notes:", e)

    if config.remove_fragments:
        fs.remove_fragments(config.fragments_dir, result.consumed_files)
        console.print(
            f"  [green]✓[/] Removed {len(result.consumed_files)} fragment(s) "
            f"from {config.fragments_dir}"
        )

    console.print(
        Panel(
            f"[green]Successfully merged release {result.version}![/]\n\n"
            "Next steps:\n"
            "  1. Review the changes\n"
            f"  2. Commit: [cyan]git add . && git commit -m "
            f"'chore(release): {result.version}'[/]\n"
            f"  3. Tag: [cyan]git tag -a {result.version} -F <release notes>[/]",
            title="[green]Merge Complete[/]",
            border_style="green",
        )
    )
