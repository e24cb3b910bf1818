"""Shared fixtures for changelog-manager tests."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

CHANGELOG_HEADER = """\
# Changelog

All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.1.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).

## [Unreleased]
"""

EXISTING_CHANGELOG = (
    CHANGELOG_HEADER
    + """
## [0.1.0] - 2024-10-14

### Added

- Some new feature
"""
)


class MemorySource:
    """In-memory fragment source: {directory: {name: content}}."""

    def __init__(self, files: dict[str, dict[str, str]] | None = None) -> None:
        self.files = files or {}
        self.reads: list[str] = []

    def add(self, directory: str, name: str, content: str | dict[str, Any]) -> None:
        if not isinstance(content, str):
            content = json.dumps(content)
        self.files.setdefault(directory, {})[name] = content

    def list_files(self, directory: str) -> list[str]:
        # Deliberately unsorted, the reader must sort
        return list(reversed(list(self.files.get(directory, {}))))

    def read_text(self, directory: str, name: str) -> str:
        self.reads.append(name)
        try:
            return self.files[directory][name]
        except KeyError:
            raise FileNotFoundError(name) from None


@pytest.fixture
def memory_source() -> MemorySource:
    """An empty in-memory fragment source."""
    return MemorySource()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project with a pyproject.toml at version 0.1.0 and an existing changelog."""
    (tmp_path / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "0.1.0"
dependencies = [
    "rich",
]

[tool.changelog-manager]
fragments_dir = "unreleased_changelogs"
"""
    )
    (tmp_path / "CHANGELOG.md").write_text(EXISTING_CHANGELOG)
    (tmp_path / "unreleased_changelogs").mkdir()
    return tmp_path


@pytest.fixture
def add_fragment(project_dir: Path) -> Callable[..., Path]:
    """Write a fragment file into the project's fragment directory."""

    def _add(name: str, **fields: Any) -> Path:
        path = project_dir / "unreleased_changelogs" / f"{name}.json"
        path.write_text(json.dumps(fields, indent=4))
        return path

    return _add
