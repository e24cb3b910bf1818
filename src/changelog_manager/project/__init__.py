"""Project files: pyproject.toml version and local file access."""
