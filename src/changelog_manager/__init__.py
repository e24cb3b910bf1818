"""changelog-manager: conflict-free changelogs from per-change fragments."""

from __future__ import annotations

__version__ = "0.1.0"
