"""Semantic version parsing, ordering and bumping.

Versions follow Semantic Versioning 2.0.0:
MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]. A leading "v" is accepted when
parsing, as found in tag names, but never emitted.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from enum import StrEnum
from functools import total_ordering
from typing import TYPE_CHECKING

from changelog_manager.exceptions import EmptyBatchError, VersionParseError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from changelog_manager.core.fragments import Fragment

logger = logging.getLogger(__name__)

_IDENTIFIER = r"[0-9A-Za-z-]+"
_NUMBER = r"0|[1-9]\d*"

SEMVER_PATTERN = re.compile(
    rf"""
    ^v?
    (?P<major>{_NUMBER})\.
    (?P<minor>{_NUMBER})\.
    (?P<patch>{_NUMBER})
    (?:-(?P<prerelease>{_IDENTIFIER}(?:\.{_IDENTIFIER})*))?
    (?:\+(?P<build>{_IDENTIFIER}(?:\.{_IDENTIFIER})*))?
    $
    """,
    re.VERBOSE,
)


class BumpType(StrEnum):
    """Kind of version increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    @property
    def severity(self) -> int:
        return _BUMP_SEVERITY[self]


_BUMP_SEVERITY = {
    BumpType.PATCH: 1,
    BumpType.MINOR: 2,
    BumpType.MAJOR: 3,
}


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A semantic version.

    Equality and ordering follow semver precedence, so build metadata
    is ignored when comparing.
    """

    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a version string.

        Raises:
            VersionParseError: If the string is not a semantic version
        """
        match = SEMVER_PATTERN.match(text.strip())
        if match is None:
            raise VersionParseError(text, "expected MAJOR.MINOR.PATCH")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=match.group("prerelease"),
            build=match.group("build"),
        )

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += f"-{self.prerelease}"
        if self.build:
            version += f"+{self.build}"
        return version

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    def _precedence_key(self) -> tuple[int, int, int, tuple[tuple[int, int | str], ...] | None]:
        identifiers = None
        if self.prerelease is not None:
            identifiers = tuple(_identifier_key(part) for part in self.prerelease.split("."))
        return (self.major, self.minor, self.patch, identifiers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() == other._precedence_key()

    def __hash__(self) -> int:
        return hash(self._precedence_key())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        mine = self._precedence_key()
        theirs = other._precedence_key()
        if mine[:3] != theirs[:3]:
            return mine[:3] < theirs[:3]
        # A pre-release has lower precedence than the release itself
        if mine[3] is None or theirs[3] is None:
            return mine[3] is not None and theirs[3] is None
        return mine[3] < theirs[3]

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for the given bump.

        Pre-release and build metadata are dropped.
        """
        if bump_type == BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type == BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        return Version(self.major, self.minor, self.patch + 1)

    def with_prerelease(self, identifier: str) -> Version:
        """Return a copy of this version with a pre-release identifier.

        Raises:
            VersionParseError: If the identifier is not valid semver
        """
        candidate = f"{self.major}.{self.minor}.{self.patch}-{identifier}"
        if SEMVER_PATTERN.match(candidate) is None:
            raise VersionParseError(candidate, "invalid pre-release identifier")
        return replace(self, prerelease=identifier, build=None)


def _identifier_key(identifier: str) -> tuple[int, int | str]:
    # Numeric identifiers sort before alphanumeric ones
    if identifier.isdigit():
        return (0, int(identifier))
    return (1, identifier)


def parse_version(text: str) -> Version:
    """Parse a version string. See Version.parse."""
    return Version.parse(text)


def calculate_bump(fragments: Iterable[Fragment]) -> BumpType:
    """Determine the version bump required by a batch of fragments.

    Breaking changes and removals need a major bump, additions a minor
    one, and everything else a patch.

    Raises:
        EmptyBatchError: If there are no fragments
    """
    bumps = [fragment.bump_type for fragment in fragments]
    if not bumps:
        raise EmptyBatchError("No changelog fragments found, there is nothing to release.")
    return max(bumps, key=lambda bump: bump.severity)


def resolve_next_version(
    current: Version,
    fragments: Iterable[Fragment],
    *,
    pre_release: str | None = None,
) -> Version:
    """Compute the version to release.

    Args:
        current: Version currently declared by the project
        fragments: Valid fragments of the release batch
        pre_release: Optional pre-release identifier (e.g. "rc.1")

    Returns:
        The next version, always greater than current

    Raises:
        EmptyBatchError: If there are no fragments
    """
    bump_type = calculate_bump(fragments)
    next_version = current.bump(bump_type)
    if pre_release:
        next_version = next_version.with_prerelease(pre_release)
    logger.debug("Resolved %s bump: %s -> %s", bump_type, current, next_version)
    return next_version
