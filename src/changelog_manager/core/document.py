"""Insertion of a release section into a Keep-a-Changelog document.

The document is handled as a list of lines with their original line
endings, so everything outside the inserted block is written back
exactly as it was read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from changelog_manager.exceptions import AlreadyReleasedError, MalformedDocumentError

logger = logging.getLogger(__name__)

UNRELEASED_MARKER = "## [Unreleased]"

DEFAULT_CHANGELOG = """\
# Changelog

All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.1.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).

## [Unreleased]
"""


def new_changelog() -> str:
    """Content of a changelog that has no release yet."""
    return DEFAULT_CHANGELOG


@dataclass(frozen=True)
class ChangelogDocument:
    """A changelog as ordered lines, with the position of the Unreleased marker."""

    lines: tuple[str, ...]
    marker_index: int

    @classmethod
    def parse(cls, text: str) -> ChangelogDocument:
        """Split a changelog into lines and locate the Unreleased marker.

        Raises:
            MalformedDocumentError: If the document has no Unreleased marker
        """
        lines = tuple(text.splitlines(keepends=True))
        for index, line in enumerate(lines):
            if line.rstrip() == UNRELEASED_MARKER:
                return cls(lines=lines, marker_index=index)
        raise MalformedDocumentError(
            f"Changelog has no '{UNRELEASED_MARKER}' line, cannot tell where to insert the release."
        )

    def render(self) -> str:
        return "".join(self.lines)

    @property
    def newline(self) -> str:
        """Line ending used by the marker line."""
        marker = self.lines[self.marker_index]
        stripped = marker.rstrip("\r\n")
        return marker[len(stripped) :] or "\n"

    def contains_release(self, heading: str) -> bool:
        """Whether a section for the same version as ``heading`` exists."""
        prefix = _version_prefix(heading)
        return any(line.rstrip().startswith(prefix) for line in self.lines)

    def section_after_marker(self, section: str) -> bool:
        """Whether ``section`` already sits directly below the marker."""
        expected = section.splitlines()
        following = [line.rstrip("\r\n") for line in self.lines[self.marker_index + 1 :]]
        while following and not following[0].strip():
            following.pop(0)
        return following[: len(expected)] == expected

    def latest_release(self) -> tuple[str, list[str]] | None:
        """Heading and body lines of the first release below the marker."""
        heading = None
        body: list[str] = []
        for line in self.lines[self.marker_index + 1 :]:
            text = line.rstrip("\r\n")
            if text.startswith("## "):
                if heading is not None:
                    break
                heading = text
            elif heading is not None:
                body.append(text)
        if heading is None:
            return None
        return heading, _strip_blank(body)

    def insert_section(self, section: str) -> ChangelogDocument:
        """Return a new document with ``section`` below the marker.

        One blank line separates the section from the marker and from
        the content that follows it.
        """
        newline = self.newline
        head = list(self.lines[: self.marker_index + 1])
        rest = list(self.lines[self.marker_index + 1 :])

        if not head[-1].endswith(("\n", "\r")):
            # Marker is the last line and has no line ending
            head[-1] += newline

        block = [newline, *(line + newline for line in section.splitlines())]
        if rest and rest[0].strip():
            block.append(newline)

        return ChangelogDocument(
            lines=(*head, *block, *rest),
            marker_index=self.marker_index,
        )


def _strip_blank(lines: list[str]) -> list[str]:
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def _version_prefix(heading: str) -> str:
    # "## [1.2.0] - 2025-03-07" -> "## [1.2.0]"
    end = heading.find("]")
    return heading[: end + 1] if end != -1 else heading.rstrip()


def merge_section(text: str, section: str) -> str:
    """Insert a rendered release section into a changelog.

    Running the merge again with the same section leaves the document
    unchanged.

    Args:
        text: Current changelog content
        section: Section produced by render_section

    Returns:
        New changelog content

    Raises:
        MalformedDocumentError: If the changelog has no Unreleased marker, or
            already contains a different section for the same version
        AlreadyReleasedError: If the latest release has the same entries
            under another heading
    """
    document = ChangelogDocument.parse(text)

    if document.section_after_marker(section):
        logger.info("Release section is already present, changelog left unchanged")
        return text

    lines = section.splitlines()
    heading = lines[0] if lines else ""
    if document.contains_release(heading):
        raise MalformedDocumentError(
            f"Changelog already contains a release section for '{_version_prefix(heading)}'.",
            details={"heading": heading},
        )

    latest = document.latest_release()
    if latest is not None and latest[1] and latest[1] == _strip_blank(lines[1:]):
        raise AlreadyReleasedError(
            f"The pending entries are already released under '{latest[0]}'. "
            "Remove the merged fragments before releasing again.",
            details={"heading": latest[0]},
        )

    return document.insert_section(section).render()
