"""Release orchestration.

Runs the whole pipeline for one release: read fragments, apply the
invalid-fragment policy, resolve the version, render the section and
the release notes, and merge the section into the changelog. Either a
complete result is returned or an error is raised; nothing is written
here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from changelog_manager.core.document import merge_section
from changelog_manager.core.fragments import (
    DEFAULT_FRAGMENT_EXTENSION,
    Fragment,
    FragmentSource,
    collect_fragments,
    read_fragments,
)
from changelog_manager.core.grouping import GroupedFragments, group_fragments
from changelog_manager.core.render import render_release_notes, render_section
from changelog_manager.core.version import Version, calculate_bump, resolve_next_version
from changelog_manager.exceptions import EmptyBatchError, VersionParseError

if TYPE_CHECKING:
    from datetime import date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReleaseBatch:
    """Valid fragments of one release, grouped, with the target version and date."""

    version: Version
    release_date: date
    grouped: GroupedFragments

    @property
    def fragments(self) -> list[Fragment]:
        return [fragment for fragments in self.grouped.values() for fragment in fragments]

    def render_section(self) -> str:
        return render_section(self.version, self.release_date, self.grouped)

    def render_release_notes(self) -> str:
        return render_release_notes(self.version, self.release_date, self.grouped)


@dataclass(frozen=True)
class ReleaseResult:
    """Everything produced by a release run."""

    version: Version
    previous_version: Version
    document: str
    section: str
    release_notes: str
    consumed_files: list[str]


def build_batch(
    fragments: list[Fragment],
    current_version: Version,
    release_date: date,
    *,
    pre_release: str | None = None,
    version_override: Version | None = None,
) -> ReleaseBatch:
    """Resolve the target version and group the fragments of a release.

    Raises:
        EmptyBatchError: If there are no fragments
        VersionParseError: If version_override is not greater than current_version
    """
    if not fragments:
        raise EmptyBatchError("No changelog fragments found, there is nothing to release.")

    if version_override is not None:
        if version_override <= current_version:
            raise VersionParseError(
                str(version_override),
                f"must be greater than the current version {current_version}",
            )
        logger.debug(
            "Using version override %s (fragments ask for a %s bump)",
            version_override,
            calculate_bump(fragments),
        )
        version = version_override
    else:
        version = resolve_next_version(current_version, fragments, pre_release=pre_release)

    return ReleaseBatch(
        version=version,
        release_date=release_date,
        grouped=group_fragments(fragments),
    )


def prepare_release(
    source: FragmentSource,
    fragments_dir: str,
    document: str,
    current_version: Version,
    release_date: date,
    *,
    extension: str = DEFAULT_FRAGMENT_EXTENSION,
    allow_invalid: bool = False,
    pre_release: str | None = None,
    version_override: Version | None = None,
) -> ReleaseResult:
    """Compute a release from the fragments and the current changelog.

    Args:
        source: Read access to the fragment directory
        fragments_dir: Fragment directory, passed through to source
        document: Current changelog content
        current_version: Version currently declared by the project
        release_date: Date printed in the section heading
        extension: Fragment file extension
        allow_invalid: Skip invalid fragments instead of failing
        pre_release: Optional pre-release identifier for the new version
        version_override: Release this version instead of resolving one

    Returns:
        The new changelog, version and release notes

    Raises:
        InvalidFragmentError: If a fragment is invalid and allow_invalid is False
        EmptyBatchError: If there are no valid fragments
        VersionParseError: If version_override is not greater than current_version
        MalformedDocumentError: If the changelog has no Unreleased marker
        AlreadyReleasedError: If the fragments were already released by a
            previous merge
    """
    results = read_fragments(source, fragments_dir, extension=extension)
    fragments = collect_fragments(results, allow_invalid=allow_invalid)

    batch = build_batch(
        fragments,
        current_version,
        release_date,
        pre_release=pre_release,
        version_override=version_override,
    )
    section = batch.render_section()
    new_document = merge_section(document, section)

    logger.info(
        "Prepared release %s with %d fragment(s)", batch.version, len(batch.fragments)
    )
    return ReleaseResult(
        version=batch.version,
        previous_version=current_version,
        document=new_document,
        section=section,
        release_notes=batch.render_release_notes(),
        consumed_files=[
            fragment.source_file for fragment in fragments if fragment.source_file is not None
        ],
    )
