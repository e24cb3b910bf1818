"""Command-line interface for changelog-manager."""
