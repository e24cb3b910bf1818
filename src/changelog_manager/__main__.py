"""Allow running as ``python -m changelog_manager``."""

from changelog_manager.cli.main import app

app()
