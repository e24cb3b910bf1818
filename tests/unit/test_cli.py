"""Tests for the command-line interface."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from changelog_manager import __version__
from changelog_manager.cli.commands import create as create_command
from changelog_manager.cli.commands.create import slugify
from changelog_manager.cli.main import app
from tests.conftest import EXISTING_CHANGELOG

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

runner = CliRunner()


def flat(text: str) -> str:
    """Undo rich line wrapping."""
    return " ".join(text.split())


@pytest.fixture
def release_ready(project_dir: Path, add_fragment: Callable[..., Path]) -> Path:
    """A project with two pending fragments."""
    add_fragment(
        "feature-update-check",
        category="Added",
        summary="Add message when new release is available",
    )
    add_fragment("bump-x", category="Technical", summary="Bump dependency X to 0.38.8")
    return project_dir


class TestMain:
    """Tests for the root command."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "merge" in result.output


class TestMerge:
    """Tests for the merge command."""

    def test_dry_run_changes_nothing(self, release_ready: Path):
        result = runner.invoke(app, ["merge", "--path", str(release_ready)])

        assert result.exit_code == 0, result.output
        assert "DRY-RUN" in result.output
        assert "0.2.0" in result.output
        assert (release_ready / "CHANGELOG.md").read_text() == EXISTING_CHANGELOG
        assert len(list((release_ready / "unreleased_changelogs").iterdir())) == 2

    def test_execute(self, release_ready: Path):
        result = runner.invoke(
            app,
            [
                "merge",
                "--execute",
                "--date",
                "2025-03-07",
                "--notes-file",
                "RELEASE_NOTES.txt",
                "--path",
                str(release_ready),
            ],
        )

        assert result.exit_code == 0, result.output
        changelog = (release_ready / "CHANGELOG.md").read_text()
        assert "## [Unreleased]\n\n## [0.2.0] - 2025-03-07\n\n### Added\n" in changelog
        assert changelog.endswith(EXISTING_CHANGELOG.split("## [Unreleased]\n")[1])
        assert 'version = "0.2.0"' in (release_ready / "pyproject.toml").read_text()
        assert list((release_ready / "unreleased_changelogs").iterdir()) == []
        notes = (release_ready / "RELEASE_NOTES.txt").read_text()
        assert notes.startswith("0.2.0 (2025-03-07)\n")

    def test_execute_with_current_version_keeps_pyproject(self, release_ready: Path):
        """An explicit current version is not written back to pyproject.toml."""
        result = runner.invoke(
            app,
            ["merge", "-x", "--current-version", "1.4.0", "--path", str(release_ready)],
        )

        assert result.exit_code == 0, result.output
        assert "## [1.5.0]" in (release_ready / "CHANGELOG.md").read_text()
        assert 'version = "0.1.0"' in (release_ready / "pyproject.toml").read_text()

    def test_creates_missing_changelog(self, release_ready: Path):
        (release_ready / "CHANGELOG.md").unlink()

        result = runner.invoke(app, ["merge", "-x", "--path", str(release_ready)])

        assert result.exit_code == 0, result.output
        changelog = (release_ready / "CHANGELOG.md").read_text()
        assert changelog.startswith("# Changelog\n")
        assert "## [0.2.0]" in changelog

    def test_invalid_fragment_fails(self, release_ready: Path):
        (release_ready / "unreleased_changelogs" / "broken.json").write_text('{"category": "Nope"}')

        result = runner.invoke(app, ["merge", "-x", "--path", str(release_ready)])

        assert result.exit_code == 1
        assert "broken.json" in result.output
        assert (release_ready / "CHANGELOG.md").read_text() == EXISTING_CHANGELOG

    def test_empty_batch_fails(self, project_dir: Path):
        result = runner.invoke(app, ["merge", "-x", "--path", str(project_dir)])

        assert result.exit_code == 1
        assert "nothing to release" in flat(result.output)
        assert (project_dir / "CHANGELOG.md").read_text() == EXISTING_CHANGELOG

    def test_malformed_changelog_fails(self, release_ready: Path):
        (release_ready / "CHANGELOG.md").write_text("# Changelog\n")

        result = runner.invoke(app, ["merge", "-x", "--path", str(release_ready)])

        assert result.exit_code == 1
        assert (release_ready / "CHANGELOG.md").read_text() == "# Changelog\n"
        assert 'version = "0.1.0"' in (release_ready / "pyproject.toml").read_text()

    def test_kept_fragments_are_not_released_twice(self, release_ready: Path):
        """With remove_fragments = false a second merge refuses to run."""
        pyproject = release_ready / "pyproject.toml"
        pyproject.write_text(pyproject.read_text() + "remove_fragments = false\n")
        args = ["merge", "-x", "--date", "2025-03-07", "--path", str(release_ready)]

        assert runner.invoke(app, args).exit_code == 0
        merged = (release_ready / "CHANGELOG.md").read_text()
        result = runner.invoke(app, args)

        assert result.exit_code == 1
        assert "already released" in flat(result.output)
        assert (release_ready / "CHANGELOG.md").read_text() == merged
        assert merged.count("- Add message when new release is available") == 1
        assert 'version = "0.2.0"' in pyproject.read_text()

    def test_failed_changelog_write_keeps_version(self, release_ready: Path):
        """pyproject.toml is only bumped once the changelog is written."""
        (release_ready / "CHANGELOG.md").unlink()
        (release_ready / "CHANGELOG.md").mkdir()

        result = runner.invoke(app, ["merge", "-x", "--path", str(release_ready)])

        assert result.exit_code == 1
        assert "Error writing changelog" in flat(result.output)
        assert 'version = "0.1.0"' in (release_ready / "pyproject.toml").read_text()
        assert len(list((release_ready / "unreleased_changelogs").iterdir())) == 2

    def test_bad_date(self, release_ready: Path):
        result = runner.invoke(
            app, ["merge", "--date", "07/03/2025", "--path", str(release_ready)]
        )

        assert result.exit_code == 1
        assert "YYYY-MM-DD" in flat(result.output)


class TestNotes:
    """Tests for the notes and next-version commands."""

    def test_notes(self, release_ready: Path):
        result = runner.invoke(
            app, ["notes", "--date", "2025-03-07", "--path", str(release_ready)]
        )

        assert result.exit_code == 0, result.output
        assert result.stdout == (
            "0.2.0 (2025-03-07)\n"
            "\n"
            "Added:\n"
            "- Add message when new release is available\n"
            "\n"
            "Technical:\n"
            "- Bump dependency X to 0.38.8\n"
        )
        assert (release_ready / "CHANGELOG.md").read_text() == EXISTING_CHANGELOG

    def test_next_version(self, release_ready: Path):
        result = runner.invoke(app, ["next-version", "--path", str(release_ready)])

        assert result.exit_code == 0, result.output
        assert result.stdout == "0.2.0\n"

    def test_next_version_bad_current(self, release_ready: Path):
        result = runner.invoke(
            app, ["next-version", "--current-version", "one", "--path", str(release_ready)]
        )

        assert result.exit_code == 1
        assert "Invalid version" in flat(result.output)


class TestCheck:
    """Tests for the check command."""

    def test_all_valid(self, release_ready: Path):
        result = runner.invoke(app, ["check", "--path", str(release_ready)])

        assert result.exit_code == 0
        assert "All 2 fragment(s) are valid" in flat(result.output)

    def test_reports_every_invalid_file(self, release_ready: Path):
        fragments_dir = release_ready / "unreleased_changelogs"
        (fragments_dir / "broken.json").write_text("{")
        (fragments_dir / "empty.json").write_text('{"category": "Fixed", "summary": ""}')

        result = runner.invoke(app, ["check", "--path", str(release_ready)])

        assert result.exit_code == 1
        assert "broken.json" in result.output
        assert "empty.json" in result.output

    def test_no_fragments(self, project_dir: Path):
        result = runner.invoke(app, ["check", "--path", str(project_dir)])

        assert result.exit_code == 0
        assert "No fragments found" in flat(result.output)


class TestCreate:
    """Tests for the create command."""

    def test_create_named(self, project_dir: Path):
        result = runner.invoke(
            app,
            [
                "create",
                "--category",
                "added",
                "--summary",
                "Add export",
                "--reference",
                "https://example.com/issues/1",
                "--author",
                "Jo",
                "--name",
                "Feature/Export",
                "--path",
                str(project_dir),
            ],
        )

        assert result.exit_code == 0, result.output
        fragment_path = project_dir / "unreleased_changelogs" / "feature-export.json"
        data = json.loads(fragment_path.read_text())
        assert data["category"] == "Added"
        assert data["summary"] == "Add export"
        assert data["reference"] == "https://example.com/issues/1"
        assert data["author"] == "Jo"
        assert data["breaking"] is False

    def test_create_from_branch(self, project_dir: Path, monkeypatch: pytest.MonkeyPatch):
        answers = {
            ("config", "--get", "user.name"): "Test User",
            ("rev-parse", "--abbrev-ref", "HEAD"): "fix/ABC-12_crash",
        }
        monkeypatch.setattr(create_command, "_git", lambda _path, *args: answers[args])

        result = runner.invoke(
            app,
            ["create", "-c", "Fixed", "-s", "Fix crash", "--breaking", "--path", str(project_dir)],
        )

        assert result.exit_code == 0, result.output
        fragment_path = project_dir / "unreleased_changelogs" / "fix-abc-12-crash.json"
        data = json.loads(fragment_path.read_text())
        assert data["author"] == "Test User"
        assert data["breaking"] is True

    def test_refuses_overwrite(self, project_dir: Path):
        args = ["create", "-c", "Fixed", "-s", "Fix", "-n", "same", "--path", str(project_dir)]

        assert runner.invoke(app, args).exit_code == 0
        result = runner.invoke(app, args)

        assert result.exit_code == 1
        assert "already exists" in flat(result.output)

    def test_empty_summary(self, project_dir: Path):
        result = runner.invoke(
            app, ["create", "-c", "Fixed", "-s", " ", "-n", "x", "--path", str(project_dir)]
        )

        assert result.exit_code == 1
        assert "summary must not be empty" in flat(result.output)

    def test_unknown_category(self, project_dir: Path):
        result = runner.invoke(
            app, ["create", "-c", "Feature", "-s", "x", "-n", "x", "--path", str(project_dir)]
        )
        assert result.exit_code == 2

    @pytest.mark.parametrize(
        ("branch", "expected"),
        [
            ("main", "main"),
            ("feature/ABC-42_New thing", "feature-abc-42-new-thing"),
            ("--weird--", "weird"),
        ],
    )
    def test_slugify(self, branch: str, expected: str):
        assert slugify(branch) == expected
