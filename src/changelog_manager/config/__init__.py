"""Configuration management for changelog-manager."""

from __future__ import annotations

from changelog_manager.config.loader import load_config
from changelog_manager.config.models import ChangelogManagerConfig

__all__ = [
    "ChangelogManagerConfig",
    "load_config",
]
