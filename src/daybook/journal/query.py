"""Read-time queries over the entry store.

There is no index. Every query lists the entry directory and decodes every
file, which is fine for a personal diary of a few thousand entries. All
list results are ordered newest first by identifier.
"""

from __future__ import annotations

import math
from collections import Counter
from datetime import date, datetime
from zoneinfo import ZoneInfo

from loguru import logger

from . import filename as fn
from .models import Entry, Memory, Page, TagCount
from .quick_tags import normalize_tag
from .store import EntryStore

DEFAULT_MEMORY_YEARS = 10


def years_before(reference: date, years: int) -> date | None:
    """The same calendar day *years* years earlier.

    February 29 falls back to February 28 in non-leap years. Returns None
    when the result would precede year 1.
    """
    year = reference.year - years
    if year < 1:
        return None
    try:
        return reference.replace(year=year)
    except ValueError:
        return reference.replace(year=year, day=28)


def paginate(items: list, page: int, page_size: int) -> Page:
    """Slice out one page of *items*.

    *page* is clamped to at least 1. A page past the end is empty.

    Raises:
        ValueError: If *page_size* is less than 1.
    """
    if page_size < 1:
        raise ValueError("page_size must be at least 1")
    try:
        page = max(1, int(page))
    except (TypeError, ValueError):
        page = 1
    total = len(items)
    offset = (page - 1) * page_size
    return Page(
        items=items[offset : offset + page_size],
        page=page,
        page_size=page_size,
        total=total,
        total_pages=math.ceil(total / page_size),
    )


class QueryEngine:
    """Listing, search and filtering on top of an :class:`EntryStore`."""

    def __init__(
        self,
        store: EntryStore,
        timezone: str = "Europe/Berlin",
        memory_years: int = DEFAULT_MEMORY_YEARS,
    ):
        self.store = store
        self.timezone = ZoneInfo(timezone)
        self.memory_years = memory_years

    def today(self) -> date:
        return datetime.now(self.timezone).date()

    def get(self, identifier: str) -> Entry | None:
        return self.store.load(identifier)

    def list_all(self) -> list[Entry]:
        """Every readable entry, newest first.

        Files that can't be read are skipped with a warning so one bad file
        never hides the rest of the diary.
        """
        entries = []
        for identifier in self.store.identifiers():
            try:
                blob = self.store.read_raw(identifier)
            except OSError as e:
                logger.warning(f"Skipping unreadable entry {identifier}: {e}")
                continue
            if blob is None:
                # Removed between listing and reading
                continue
            entries.append(self.store.to_entry(identifier, blob))
        entries.sort(key=lambda e: e.identifier, reverse=True)
        return entries

    def search(self, keyword: str) -> list[Entry]:
        """Entries whose title or stored content contains *keyword*, ignoring case.

        Content means the full stored body, quick-tag lines included. A blank
        keyword matches everything.
        """
        needle = (keyword or "").strip().casefold()
        entries = self.list_all()
        if not needle:
            return entries
        return [e for e in entries if needle in e.title.casefold() or needle in e.raw_content.casefold()]

    def filter_by_tag(self, tag: str) -> list[Entry]:
        """Entries carrying *tag*, compared case-insensitively."""
        if not normalize_tag(tag):
            return []
        return [e for e in self.list_all() if e.has_tag(tag)]

    def filter_by_month(self, year: int, month: int) -> list[Entry]:
        prefix = fn.month_prefix(year, month)
        return [e for e in self.list_all() if e.identifier.startswith(prefix)]

    def filter_by_date(self, entry_date: date | str) -> list[Entry]:
        target = fn.parse_date(entry_date)
        return [e for e in self.list_all() if e.date == target]

    def memories(self, reference_date: date | str | None = None) -> list[Memory]:
        """Entries written on this calendar day 1 to ``memory_years`` years ago.

        Ordered by ``years_ago`` ascending, newest first within each year.
        Defaults to today in the configured timezone.

        Raises:
            InvalidFormat: If *reference_date* is a malformed date string.
        """
        reference = fn.parse_date(reference_date) if reference_date is not None else self.today()
        targets: dict[date, int] = {}
        for years_ago in range(1, self.memory_years + 1):
            past = years_before(reference, years_ago)
            if past is not None:
                targets[past] = years_ago

        by_years: dict[int, list[Entry]] = {}
        for entry in self.list_all():
            years_ago = targets.get(entry.date)
            if years_ago is not None:
                by_years.setdefault(years_ago, []).append(entry)

        return [Memory(entry=entry, years_ago=k) for k in sorted(by_years) for entry in by_years[k]]

    def paginate(self, items: list, page: int, page_size: int) -> Page:
        return paginate(items, page, page_size)

    def tag_cloud(self) -> list[TagCount]:
        """Tag usage counts, most used first, ties broken alphabetically.

        Tags are counted once per entry and merged case-insensitively; the
        spelling shown is the one used by the newest entry.
        """
        counts: Counter[str] = Counter()
        display: dict[str, str] = {}
        for entry in self.list_all():
            keys = set()
            for tag in entry.entry_tags:
                key = normalize_tag(tag)
                if not key or key in keys:
                    continue
                keys.add(key)
                display.setdefault(key, tag.strip().lstrip("#").strip())
            counts.update(keys)
        ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        return [TagCount(tag=display[key], count=count) for key, count in ranked]

    def months(self) -> list[tuple[str, int]]:
        """Distinct ``YYYY-MM`` months with their entry counts, newest first."""
        counts = Counter(identifier[:7] for identifier in self.store.identifiers())
        return sorted(counts.items(), reverse=True)
