"""pyproject.toml version manipulation.

This module provides functionality for reading and updating
the version number in pyproject.toml files.

It preserves formatting and comments by using regex-based
replacement rather than full TOML parsing and rewriting.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from changelog_manager.config.loader import find_pyproject_toml
from changelog_manager.exceptions import ProjectError, VersionNotFoundError

if TYPE_CHECKING:
    from pathlib import Path

# Tables that may declare the project version, in lookup order
_VERSION_TABLES = (r"\[project\]", r"\[tool\.poetry\]")


def _resolve(path: Path | None) -> Path:
    if path is None:
        return find_pyproject_toml()
    if path.is_dir():
        return find_pyproject_toml(path)
    return path


def get_pyproject_version(path: Path | None = None) -> str:
    """Get the version from pyproject.toml.

    Args:
        path: Path to pyproject.toml or directory to search from

    Returns:
        Version string

    Raises:
        VersionNotFoundError: If version cannot be found
    """
    pyproject_path = _resolve(path)
    content = pyproject_path.read_text()

    for table in _VERSION_TABLES:
        section = re.search(rf"^{table}.*?(?=^\[|\Z)", content, re.MULTILINE | re.DOTALL)
        if section is None:
            continue
        match = re.search(
            r"^version\s*=\s*[\"']([^\"']+)[\"']",
            section.group(0),
            re.MULTILINE,
        )
        if match:
            return match.group(1)

    raise VersionNotFoundError(
        f"Could not find version in {pyproject_path}. "
        "Expected [project].version or [tool.poetry].version."
    )


def update_pyproject_version(path: Path | None, new_version: str) -> Path:
    """Update the version in pyproject.toml.

    This function preserves formatting and comments by using
    a targeted regex replacement.

    Args:
        path: Path to pyproject.toml or directory containing it
        new_version: New version string to set

    Returns:
        Path to the updated pyproject.toml

    Raises:
        VersionNotFoundError: If version cannot be found
        ProjectError: If update fails
    """
    pyproject_path = _resolve(path)
    content = pyproject_path.read_text()

    def replace_version(match: re.Match[str]) -> str:
        return re.sub(
            r"^(version\s*=\s*)[\"'][^\"']+[\"']",
            rf'\g<1>"{new_version}"',
            match.group(0),
            count=1,
            flags=re.MULTILINE,
        )

    for table in _VERSION_TABLES:
        # The whole table, up to the next table header or EOF
        new_content, count = re.subn(
            rf"^{table}.*?(?=^\[|\Z)",
            replace_version,
            content,
            count=1,
            flags=re.MULTILINE | re.DOTALL,
        )
        if count > 0 and new_content != content:
            pyproject_path.write_text(new_content)
            return pyproject_path

    if get_pyproject_version(pyproject_path) == new_version:
        raise ProjectError(
            f"Version in {pyproject_path} was not updated. It is already {new_version}."
        )
    raise VersionNotFoundError(
        f"Could not find version to update in {pyproject_path}. "
        "Expected [project].version or [tool.poetry].version."
    )
