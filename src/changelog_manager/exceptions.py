"""Exception hierarchy for changelog-manager.

Every error raised by the library derives from ChangelogManagerError so
the CLI can report it uniformly. Each error carries enough context
(file name, offending text) to produce an actionable message.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from changelog_manager.core.fragments import InvalidFragment


class ChangelogManagerError(Exception):
    """Base class for all changelog-manager errors."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# Fragments


class InvalidFragmentError(ChangelogManagerError):
    """One or more fragment files could not be parsed or validated."""

    def __init__(self, errors: Sequence[InvalidFragment]) -> None:
        self.errors = list(errors)
        lines = [f"{len(self.errors)} invalid fragment(s):"]
        lines.extend(f"  {error.source_file}: {error.message}" for error in self.errors)
        super().__init__(
            "\n".join(lines),
            details={"files": [error.source_file for error in self.errors]},
        )


class EmptyBatchError(ChangelogManagerError):
    """No valid fragments were found, so there is nothing to release."""


# Changelog document


class MalformedDocumentError(ChangelogManagerError):
    """The changelog document has no usable insertion point."""


class AlreadyReleasedError(ChangelogManagerError):
    """The pending entries are already the latest release of the changelog."""


# Versions


class VersionParseError(ChangelogManagerError):
    """A version string is not a valid semantic version."""

    def __init__(self, text: str, reason: str | None = None) -> None:
        self.text = text
        message = f"Invalid version: {text!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, details={"text": text})


# Configuration


class ConfigError(ChangelogManagerError):
    """Base class for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """pyproject.toml could not be located."""


class ConfigValidationError(ConfigError):
    """Configuration values failed validation."""


# Project files


class ProjectError(ChangelogManagerError):
    """A project file could not be read or updated."""


class VersionNotFoundError(ProjectError):
    """The project version could not be found in a project file."""
