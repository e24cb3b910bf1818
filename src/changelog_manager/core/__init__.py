"""Core business logic for changelog-manager.

This module contains the fundamental building blocks:
- Fragment parsing and validation
- Grouping by Keep-a-Changelog category
- Semantic version parsing and bump resolution
- Section and release notes rendering
- Changelog document merging
"""

from __future__ import annotations

from changelog_manager.core.document import ChangelogDocument, merge_section, new_changelog
from changelog_manager.core.fragments import (
    Category,
    Fragment,
    FragmentSource,
    InvalidFragment,
    collect_fragments,
    read_fragments,
)
from changelog_manager.core.grouping import group_fragments
from changelog_manager.core.release import ReleaseBatch, ReleaseResult, prepare_release
from changelog_manager.core.render import parse_section, render_release_notes, render_section
from changelog_manager.core.version import (
    BumpType,
    Version,
    calculate_bump,
    parse_version,
    resolve_next_version,
)

__all__ = [
    # Version
    "BumpType",
    # Fragments
    "Category",
    # Document
    "ChangelogDocument",
    "Fragment",
    "FragmentSource",
    "InvalidFragment",
    # Release
    "ReleaseBatch",
    "ReleaseResult",
    "Version",
    "calculate_bump",
    "collect_fragments",
    # Grouping
    "group_fragments",
    "merge_section",
    "new_changelog",
    # Rendering
    "parse_section",
    "parse_version",
    "prepare_release",
    "read_fragments",
    "render_release_notes",
    "render_section",
    "resolve_next_version",
]
