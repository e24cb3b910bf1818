"""Changelog fragments: the model and the fragment store reader.

A fragment is one JSON file describing one unreleased change, usually
written by the contributor of a pull request:

    {
        "category": "Added",
        "summary": "Add message when new release is available",
        "reference": "https://gitlab.example.com/group/project/-/issues/42"
    }

Fragments written by older tooling use ``type``/``title``/``issue`` and
``isBreakingChange``; both spellings are accepted.

Reading never raises for a single bad file. Each file yields either a
Fragment or an InvalidFragment, and the caller decides what to do with
the invalid ones (see collect_fragments).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from changelog_manager.core.version import BumpType
from changelog_manager.exceptions import InvalidFragmentError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)

DEFAULT_FRAGMENT_EXTENSION = ".json"


class Category(StrEnum):
    """Keep-a-Changelog change categories, declared in render order."""

    ADDED = "Added"
    CHANGED = "Changed"
    DEPRECATED = "Deprecated"
    REMOVED = "Removed"
    FIXED = "Fixed"
    SECURITY = "Security"
    TECHNICAL = "Technical"

    @classmethod
    def parse(cls, value: str) -> Category:
        """Parse a category name, ignoring case.

        Raises:
            ValueError: If the name is not a known category
        """
        key = value.strip().lower()
        for category in cls:
            if category.value.lower() == key:
                return category
        choices = ", ".join(category.value for category in cls)
        raise ValueError(f"unknown category {value!r}, expected one of: {choices}")

    @property
    def order(self) -> int:
        """Position of the category in a rendered section."""
        return CATEGORY_ORDER.index(self)

    @property
    def bump_type(self) -> BumpType:
        """Version bump implied by a fragment of this category."""
        return CATEGORY_BUMP[self]


CATEGORY_ORDER: tuple[Category, ...] = tuple(Category)

CATEGORY_BUMP: dict[Category, BumpType] = {
    Category.ADDED: BumpType.MINOR,
    Category.CHANGED: BumpType.PATCH,
    Category.DEPRECATED: BumpType.PATCH,
    Category.REMOVED: BumpType.MAJOR,
    Category.FIXED: BumpType.PATCH,
    Category.SECURITY: BumpType.PATCH,
    Category.TECHNICAL: BumpType.PATCH,
}


class Fragment(BaseModel):
    """One unreleased change entry."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    category: Category = Field(validation_alias=AliasChoices("category", "type"))
    summary: str = Field(validation_alias=AliasChoices("summary", "title"))
    reference: str | None = Field(
        default=None,
        validation_alias=AliasChoices("reference", "issue"),
    )
    author: str | None = None
    description: str | None = None
    breaking: bool = Field(
        default=False,
        validation_alias=AliasChoices("breaking", "isBreakingChange"),
    )
    # Name of the file the fragment was read from; never serialized
    source_file: str | None = Field(default=None, exclude=True)

    @field_validator("category", mode="before")
    @classmethod
    def _parse_category(cls, value: object) -> object:
        if isinstance(value, str) and not isinstance(value, Category):
            return Category.parse(value)
        return value

    @field_validator("summary")
    @classmethod
    def _check_summary(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("summary must not be empty")
        if "\n" in value or "\r" in value:
            raise ValueError("summary must be a single line, use description for details")
        return value

    @field_validator("reference", "author", "description")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("reference")
    @classmethod
    def _check_reference(cls, value: str | None) -> str | None:
        if value is not None and any(char.isspace() for char in value):
            raise ValueError("reference must be a single URL or identifier without whitespace")
        return value

    @property
    def bump_type(self) -> BumpType:
        """Version bump this fragment asks for."""
        if self.breaking:
            return BumpType.MAJOR
        return self.category.bump_type

    def to_json(self) -> str:
        """Serialize the fragment as it is stored on disk."""
        return self.model_dump_json(indent=4) + "\n"

    @classmethod
    def from_json(cls, text: str, source_file: str | None = None) -> Fragment:
        """Parse a fragment file's content.

        Raises:
            pydantic.ValidationError: If the content is not a valid fragment
        """
        fragment = cls.model_validate_json(text)
        if source_file is not None:
            fragment = fragment.model_copy(update={"source_file": source_file})
        return fragment


@dataclass(frozen=True)
class InvalidFragment:
    """A fragment file that could not be turned into a Fragment."""

    source_file: str
    message: str


class FragmentSource(Protocol):
    """Read access to a directory of fragment files."""

    def list_files(self, directory: str) -> Iterable[str]:
        """Return the names of the files in ``directory``."""
        ...

    def read_text(self, directory: str, name: str) -> str:
        """Return the content of file ``name`` in ``directory``."""
        ...


def read_fragments(
    source: FragmentSource,
    directory: str,
    *,
    extension: str = DEFAULT_FRAGMENT_EXTENSION,
) -> list[Fragment | InvalidFragment]:
    """Read every fragment file in a directory.

    Files are read in lexicographic order of their names so the result
    is the same on every run. Hidden files and files without the
    fragment extension are ignored.

    Args:
        source: File access capability
        directory: Directory holding the fragment files
        extension: Fragment file extension

    Returns:
        One Fragment or InvalidFragment per fragment file
    """
    names = sorted(
        name
        for name in source.list_files(directory)
        if name.endswith(extension) and not name.startswith(".")
    )
    logger.debug("Found %d fragment file(s) in %s", len(names), directory)

    results: list[Fragment | InvalidFragment] = []
    for name in names:
        try:
            text = source.read_text(directory, name)
        except (OSError, UnicodeDecodeError) as e:
            results.append(InvalidFragment(name, f"cannot be read: {e}"))
            continue
        results.append(parse_fragment(text, name))
    return results


def parse_fragment(text: str, source_file: str) -> Fragment | InvalidFragment:
    """Parse one fragment file, returning an InvalidFragment on failure."""
    try:
        return Fragment.from_json(text, source_file=source_file)
    except ValidationError as e:
        return InvalidFragment(source_file, describe_validation_error(e))


def describe_validation_error(error: ValidationError) -> str:
    """Summarize a fragment validation error on one line."""
    messages = []
    for item in error.errors(include_url=False):
        location = ".".join(str(part) for part in item["loc"])
        message = item["msg"].removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)


def collect_fragments(
    results: Sequence[Fragment | InvalidFragment],
    *,
    allow_invalid: bool = False,
) -> list[Fragment]:
    """Apply the invalid-fragment policy to a batch of read results.

    Args:
        results: Output of read_fragments
        allow_invalid: Drop invalid fragments with a warning instead of failing

    Returns:
        Valid fragments, in discovery order

    Raises:
        InvalidFragmentError: If any fragment is invalid and allow_invalid is False
    """
    fragments = [result for result in results if isinstance(result, Fragment)]
    invalid = [result for result in results if isinstance(result, InvalidFragment)]

    if invalid and not allow_invalid:
        raise InvalidFragmentError(invalid)

    for error in invalid:
        logger.warning("Skipping invalid fragment %s: %s", error.source_file, error.message)

    return fragments
