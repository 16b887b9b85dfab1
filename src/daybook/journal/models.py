"""Data models for diary entries and query results.

Plain dataclasses with no I/O. Structured metadata parsed out of the body
(quick tags, entry tags) is computed once per read and cached on the Entry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from functools import cached_property

from daybook.core.utils.text import truncate_text

from .filename import ENTRY_SUFFIX

DEFAULT_PREVIEW_LENGTH = 150


@dataclass
class QuickTags:
    """The four optional structured fields at the top of an entry body."""

    location: str | None = None
    weather: str | None = None
    mood: str | None = None
    plans: str | None = None

    def is_empty(self) -> bool:
        return not any((self.location, self.weather, self.mood, self.plans))

    def as_dict(self) -> dict[str, str]:
        """Non-empty fields only, keyed by field name."""
        return {
            k: v
            for k, v in (
                ("location", self.location),
                ("weather", self.weather),
                ("mood", self.mood),
                ("plans", self.plans),
            )
            if v
        }


@dataclass
class ParsedContent:
    """An entry body split into structured fields plus the free-text remainder.

    Attributes:
        quick_tags: Location / weather / mood / plans.
        tags: Entry tags in their original spelling and order.
        content: Body with the metadata block and the blank lines after it removed.
    """

    quick_tags: QuickTags = field(default_factory=QuickTags)
    tags: list[str] = field(default_factory=list)
    content: str = ""


@dataclass
class Entry:
    """One diary entry as read from disk.

    Attributes:
        identifier: ``YYYY-MM-DD_HHMM``; also the file name without ``.txt``.
        date: Entry date, decoded from the identifier.
        time: Entry time (minute resolution), decoded from the identifier.
        title: First line of the record.
        images: Image file names the entry references, in display order.
        raw_content: Everything after the image line, metadata lines included.
    """

    identifier: str
    date: date
    time: time
    title: str
    images: list[str] = field(default_factory=list)
    raw_content: str = ""

    @property
    def filename(self) -> str:
        return self.identifier + ENTRY_SUFFIX

    @cached_property
    def parsed(self) -> ParsedContent:
        from .quick_tags import extract

        return extract(self.raw_content)

    @property
    def quick_tags(self) -> QuickTags:
        return self.parsed.quick_tags

    @property
    def entry_tags(self) -> list[str]:
        return self.parsed.tags

    @property
    def content_without_tags(self) -> str:
        return self.parsed.content

    def has_tag(self, tag: str) -> bool:
        from .quick_tags import normalize_tag

        key = normalize_tag(tag)
        return bool(key) and any(normalize_tag(t) == key for t in self.entry_tags)

    def preview(self, length: int = DEFAULT_PREVIEW_LENGTH) -> str:
        """First *length* characters of the free text, with an ellipsis if cut."""
        return truncate_text(self.content_without_tags, length)

    def __repr__(self) -> str:
        return f"Entry(identifier='{self.identifier}', title='{self.title}')"


@dataclass
class Memory:
    """A past entry surfaced on the same calendar day *years_ago* years later."""

    entry: Entry
    years_ago: int

    @property
    def label(self) -> str:
        return "1 year ago" if self.years_ago == 1 else f"{self.years_ago} years ago"


@dataclass
class Page:
    """One page of a result list.

    Attributes:
        items: Entries on this page.
        page: 1-based page number after clamping.
        page_size: Maximum items per page.
        total: Number of items across all pages.
        total_pages: ``ceil(total / page_size)``; 0 for an empty list.
    """

    items: list
    page: int
    page_size: int
    total: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


@dataclass(frozen=True)
class TagCount:
    tag: str
    count: int
