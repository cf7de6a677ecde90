"""Pydantic data models for structured data transfer.

Defines DTOs (Data Transfer Objects) for:
- CatalogEntry: A title found by a catalog search
- ChapterInfo: One episode of a title
- ChapterPage: One decoded page of the chapter-list endpoint
- ChapterSelection: A chosen chapter with its numeric neighbors
"""

from collections.abc import Iterable
from typing import TypeAlias

from pydantic import BaseModel, ConfigDict, Field

# Type aliases for common patterns
TitleURL: TypeAlias = str
EpisodeNumber: TypeAlias = int
StreamLinks: TypeAlias = set[str]
WatchRecord: TypeAlias = dict[TitleURL, list[EpisodeNumber]]


class CatalogEntry(BaseModel):
    """A title discovered by a catalog search.

    Attributes:
        name: Display name
        url: Locator of the title page on the remote service

    Equality and hashing use (name, url), so duplicated results collapse
    when collected into a set.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Title display name")
    url: str = Field(..., min_length=1, description="Title page URL")


class ChapterInfo(BaseModel):
    """One episode of a title, as returned by the chapter-list endpoint.

    Attributes:
        number: Episode number (JSON key "episodio")
        url: Locator of the chapter page holding the play buttons
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    number: int = Field(..., alias="episodio", description="Episode number")
    url: str = Field(..., min_length=1, description="Chapter page URL")


class ChapterPage(BaseModel):
    """Body of one chapter-list response: {"caps": [{"episodio", "url"}, ...]}."""

    caps: list[ChapterInfo] = Field(..., description="Chapters on this page")


class ChapterSelection(BaseModel):
    """A chosen chapter plus the chapters numbered one below and one above it.

    Attributes:
        previous: Chapter numbered current - 1, if listed
        current: The chosen chapter
        next: Chapter numbered current + 1, if listed
    """

    model_config = ConfigDict(frozen=True)

    previous: ChapterInfo | None = None
    current: ChapterInfo
    next: ChapterInfo | None = None

    @classmethod
    def from_chapters(
        cls, chapters: Iterable[ChapterInfo], current: ChapterInfo
    ) -> "ChapterSelection":
        """Build the selection by scanning chapters for numeric neighbors.

        With repeated numbers the first match in iteration order wins.
        """
        chapters = list(chapters)

        def find(number: int) -> ChapterInfo | None:
            return next((c for c in chapters if c.number == number), None)

        return cls(
            previous=find(current.number - 1),
            current=current,
            next=find(current.number + 1),
        )
