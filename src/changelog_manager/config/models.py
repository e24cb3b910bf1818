"""Configuration models.

Configuration lives in the ``[tool.changelog-manager]`` table of
pyproject.toml. Every key is optional.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChangelogManagerConfig(BaseModel):
    """Root configuration for changelog-manager."""

    model_config = ConfigDict(extra="forbid")

    fragments_dir: Path = Field(
        default=Path("unreleased_changelogs"),
        description="Directory holding the unreleased changelog fragments",
    )
    fragment_extension: str = Field(
        default=".json",
        description="File extension of fragment files",
    )
    changelog_path: Path = Field(
        default=Path("CHANGELOG.md"),
        description="Path to the changelog document",
    )
    allow_invalid_fragments: bool = Field(
        default=False,
        description="Skip invalid fragments instead of failing the merge",
    )
    remove_fragments: bool = Field(
        default=True,
        description="Delete consumed fragments after a successful merge",
    )
    update_project_version: bool = Field(
        default=True,
        description="Write the new version to pyproject.toml on merge",
    )
    pre_release: str | None = Field(
        default=None,
        description="Pre-release identifier appended to new versions (e.g. 'rc.1')",
    )

    @field_validator("fragment_extension")
    @classmethod
    def _dotted_extension(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("fragment_extension must not be empty")
        return value if value.startswith(".") else f".{value}"
