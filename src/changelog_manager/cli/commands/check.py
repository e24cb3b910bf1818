"""Implementation of the 'check' command.

Validates every pending fragment, typically as a merge request check.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from changelog_manager.cli.commands.common import load_project, print_invalid_fragments
from changelog_manager.core.fragments import InvalidFragment, read_fragments
from changelog_manager.project.filesystem import LocalFileSystem

if TYPE_CHECKING:
    from rich.console import Console


def run_check(path: str | None, console: Console, err_console: Console) -> None:
    """Run the check command.

    Exits with status 1 if any fragment is invalid.
    """
    project_path, config = load_project(path, err_console)

    results = read_fragments(
        LocalFileSystem(project_path),
        str(config.fragments_dir),
        extension=config.fragment_extension,
    )
    invalid = [result for result in results if isinstance(result, InvalidFragment)]

    if invalid:
        print_invalid_fragments(invalid, err_console)
        raise SystemExit(1)

    if not results:
        console.print(f"[yellow]No fragments found in {config.fragments_dir}.[/]")
        return

    console.print(f"[green]All {len(results)} fragment(s) are valid.[/]")
