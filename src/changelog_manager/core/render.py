"""Rendering of a release section.

Two renditions of the same content are produced: a Keep-a-Changelog
markdown section for CHANGELOG.md and a plain-text variant used as the
body of release tags and release descriptions. Both are deterministic:
the same version, date and fragments always give the same bytes.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from changelog_manager.core.fragments import Category, Fragment

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import date

    from changelog_manager.core.version import Version

BREAKING_PREFIX = "**BREAKING CHANGE** "
PLAIN_BREAKING_PREFIX = "BREAKING CHANGE: "

_LINKED_BULLET = re.compile(r"^\[(?P<text>.*)\]\((?P<reference>\S*)\)$")
# Characters escaped in markdown summaries so they never form a link
_MARKDOWN_SPECIAL = re.compile(r"([\\\[\]])")
_MARKDOWN_ESCAPED = re.compile(r"\\([\\\[\]])")


def section_heading(version: Version, release_date: date) -> str:
    """Markdown heading of a release section."""
    return f"## [{version}] - {release_date.isoformat()}"


def render_section(
    version: Version,
    release_date: date,
    grouped: Mapping[Category, Sequence[Fragment]],
) -> str:
    """Render a changelog section for a release.

    Args:
        version: Version being released
        release_date: Release date
        grouped: Fragments grouped by category

    Returns:
        Markdown section, ending with a single newline
    """
    lines = [section_heading(version, release_date)]

    for category, fragments in _ordered(grouped):
        lines.append("")
        lines.append(f"### {category}")
        lines.append("")
        for fragment in fragments:
            lines.extend(_markdown_entry(fragment))

    return "\n".join(lines) + "\n"


def render_release_notes(
    version: Version,
    release_date: date,
    grouped: Mapping[Category, Sequence[Fragment]],
) -> str:
    """Render the release notes as plain text.

    The content matches render_section without any markdown, so it can
    be used as a tag annotation or a release description.
    """
    lines = [f"{version} ({release_date.isoformat()})"]

    for category, fragments in _ordered(grouped):
        lines.append("")
        lines.append(f"{category}:")
        for fragment in fragments:
            lines.extend(_plain_entry(fragment))

    return "\n".join(lines) + "\n"


def parse_section(text: str) -> list[tuple[Category, str]]:
    """Read the (category, summary) pairs back from a rendered section.

    Args:
        text: Markdown produced by render_section

    Returns:
        Pairs in the order they appear in the section

    Raises:
        ValueError: If a category heading is unknown or a bullet appears
            before any category heading
    """
    entries: list[tuple[Category, str]] = []
    category: Category | None = None

    for line in text.splitlines():
        if line.startswith("### "):
            category = Category.parse(line[4:])
        elif line.startswith("- "):
            if category is None:
                raise ValueError(f"Entry outside of a category: {line!r}")
            entries.append((category, _bullet_summary(line[2:])))

    return entries


def _ordered(
    grouped: Mapping[Category, Sequence[Fragment]],
) -> list[tuple[Category, Sequence[Fragment]]]:
    return sorted(
        ((category, fragments) for category, fragments in grouped.items() if fragments),
        key=lambda item: item[0].order,
    )


def _markdown_entry(fragment: Fragment) -> list[str]:
    prefix = BREAKING_PREFIX if fragment.breaking else ""
    summary = _MARKDOWN_SPECIAL.sub(r"\\\1", fragment.summary)
    if fragment.reference:
        lines = [f"- [{prefix}{summary}]({fragment.reference})"]
    else:
        lines = [f"- {prefix}{summary}"]
    lines.extend(_description_lines(fragment))
    return lines


def _plain_entry(fragment: Fragment) -> list[str]:
    prefix = PLAIN_BREAKING_PREFIX if fragment.breaking else ""
    line = f"- {prefix}{fragment.summary}"
    if fragment.reference:
        line += f" ({fragment.reference})"
    return [line, *_description_lines(fragment)]


def _description_lines(fragment: Fragment) -> list[str]:
    if not fragment.description:
        return []
    return [f"  {line}".rstrip() for line in fragment.description.splitlines()]


def _bullet_summary(body: str) -> str:
    match = _LINKED_BULLET.match(body)
    if match:
        body = match.group("text")
    return _MARKDOWN_ESCAPED.sub(r"\1", body.removeprefix(BREAKING_PREFIX))
