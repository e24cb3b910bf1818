"""Local file access for fragments and the changelog."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from changelog_manager.exceptions import ProjectError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class LocalFileSystem:
    """Fragment source and changelog storage backed by the local disk.

    Relative directories are resolved against ``root``.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def _path(self, directory: str | Path) -> Path:
        return self.root / directory

    def list_files(self, directory: str) -> list[str]:
        path = self._path(directory)
        if not path.is_dir():
            logger.debug("Fragment directory %s does not exist", path)
            return []
        return [entry.name for entry in path.iterdir() if entry.is_file()]

    def read_text(self, directory: str, name: str) -> str:
        return (self._path(directory) / name).read_text(encoding="utf-8")

    def read_changelog(self, path: str | Path) -> str | None:
        """Return the changelog content, or None when it does not exist."""
        changelog = self._path(path)
        if not changelog.is_file():
            return None
        # newline="" keeps CRLF documents byte for byte
        with changelog.open(encoding="utf-8", newline="") as f:
            return f.read()

    def write_changelog(self, path: str | Path, content: str) -> Path:
        """Atomically replace the changelog with content."""
        changelog = self._path(path)
        changelog.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=changelog.parent, prefix=f".{changelog.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.replace(tmp_name, changelog)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise ProjectError(f"Could not write {changelog}: {e}") from e
        return changelog

    def write_fragment(self, directory: str | Path, name: str, content: str) -> Path:
        """Create a new fragment file, refusing to overwrite an existing one.

        Raises:
            ProjectError: If the fragment already exists or cannot be written
        """
        path = self._path(directory) / name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ProjectError(f"Could not create {path.parent}: {e}") from e
        try:
            with path.open("x", encoding="utf-8") as f:
                f.write(content)
        except FileExistsError as e:
            raise ProjectError(f"Fragment {path} already exists") from e
        except OSError as e:
            raise ProjectError(f"Could not write {path}: {e}") from e
        return path

    def remove_fragments(self, directory: str | Path, names: Iterable[str]) -> list[Path]:
        """Delete consumed fragment files.

        Raises:
            ProjectError: If a fragment cannot be deleted
        """
        removed = []
        for name in names:
            path = self._path(directory) / name
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise ProjectError(f"Could not remove {path}: {e}") from e
            removed.append(path)
        logger.debug("Removed %d fragment(s) from %s", len(removed), self._path(directory))
        return removed
