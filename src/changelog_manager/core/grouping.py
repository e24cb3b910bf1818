"""Grouping of fragments by change category."""

from __future__ import annotations

from typing import TYPE_CHECKING

from changelog_manager.core.fragments import CATEGORY_ORDER, Category, Fragment

if TYPE_CHECKING:
    from collections.abc import Iterable

GroupedFragments = dict[Category, list[Fragment]]


def group_fragments(fragments: Iterable[Fragment]) -> GroupedFragments:
    """Group fragments by category.

    Keys follow the fixed category order and categories without
    fragments are left out. Within a category, fragments keep the order
    they were discovered in.

    Args:
        fragments: Valid fragments in discovery order

    Returns:
        Mapping of category to its fragments
    """
    buckets: dict[Category, list[Fragment]] = {category: [] for category in CATEGORY_ORDER}
    for fragment in fragments:
        buckets[fragment.category].append(fragment)
    return {category: items for category, items in buckets.items() if items}
