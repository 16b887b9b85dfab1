"""Diary: the entry points an application calls.

Wires the entry store, image references and query engine together and
implements the save/delete workflow of the entry form: validate everything
up front, store uploads, reconcile the image list, write the entry and drop
the old file when the date or time changed.

Authentication is expected to have happened before any of these methods
is called.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, time
from pathlib import Path

from loguru import logger

from daybook.core.config import Config
from daybook.core.config_schema import DaybookConfig
from daybook.core.exceptions import ImageError, InvalidEntry, InvalidFormat, StorageUnavailable
from daybook.core.utils.logging import setup_logging_from_config

from . import filename as fn
from .image_store import LocalImageStore
from .images import ImageProcessor, ImageReferences, Upload
from .models import Entry, Memory, Page, QuickTags, TagCount
from .query import QueryEngine
from .quick_tags import compose_content, unique_tags
from .record import Record
from .store import EntryStore


class Diary:
    """High-level diary API over a directory of entry files."""

    def __init__(
        self,
        entries_dir: str | Path,
        image_processor: ImageProcessor | None = None,
        *,
        entries_per_page: int = 5,
        title_max_length: int = 200,
        timezone: str = "Europe/Berlin",
        memory_years: int = 10,
        preview_length: int = 150,
    ):
        self.images = ImageReferences(image_processor)
        self.store = EntryStore(entries_dir, images=self.images)
        self.query = QueryEngine(self.store, timezone=timezone, memory_years=memory_years)
        self.entries_per_page = entries_per_page
        self.title_max_length = title_max_length
        self.preview_length = preview_length

    @classmethod
    def from_config(
        cls,
        config: Config | DaybookConfig | None = None,
        *,
        configure_logging: bool = False,
    ) -> Diary:
        """Build a Diary with a :class:`LocalImageStore` from configuration.

        With *configure_logging*, loguru sinks are also set up from the
        ``logging`` section.
        """
        if config is None:
            settings = DaybookConfig()
        elif isinstance(config, Config):
            settings = config.validated()
        else:
            settings = config

        if configure_logging:
            setup_logging_from_config(settings)

        image_store = LocalImageStore(
            settings.paths.images_dir,
            max_size=settings.images.max_size,
            allowed_types=settings.images.allowed_types,
        )
        return cls(
            settings.paths.entries_dir,
            image_store,
            entries_per_page=settings.diary.entries_per_page,
            title_max_length=settings.diary.title_max_length,
            timezone=settings.diary.timezone,
            memory_years=settings.diary.memory_years,
            preview_length=settings.diary.preview_length,
        )

    # -- Mutations ----------------------------------------------------------

    def validate(
        self,
        entry_date: date | str,
        entry_time: time | str,
        title: str,
        content: str,
        original_identifier: str | None = None,
    ) -> list[str]:
        """Return every problem with a submitted entry; empty when valid."""
        errors = []
        try:
            fn.parse_date(entry_date)
        except InvalidFormat:
            errors.append("Invalid date format.")
        try:
            fn.parse_time(entry_time)
        except InvalidFormat:
            errors.append("Invalid time format (HH:MM required).")
        if not (title or "").strip():
            errors.append("Title is required.")
        elif len(title.strip()) > self.title_max_length:
            errors.append(f"Title must be at most {self.title_max_length} characters.")
        if not (content or "").strip():
            errors.append("Content is required.")
        if original_identifier:
            try:
                fn.decode(original_identifier)
            except InvalidFormat:
                errors.append("Invalid original entry.")
        return errors

    def save_entry(
        self,
        entry_date: date | str,
        entry_time: time | str,
        title: str,
        content: str,
        *,
        quick_tags: QuickTags | None = None,
        tags: list[str] | None = None,
        original_identifier: str | None = None,
        existing_images: Iterable[str] | None = None,
        removed_images: Iterable[str] = (),
        uploads: Iterable[Upload] = (),
    ) -> Entry:
        """Create or update an entry.

        Args:
            entry_date: Entry date, ``YYYY-MM-DD`` or a ``date``.
            entry_time: Entry time, ``HH:MM`` or a ``time``.
            title: Entry title.
            content: Free text. May already start with quick-tag lines.
            quick_tags: Structured fields to prepend to *content*.
            tags: Entry tags to prepend to *content*.
            original_identifier: Identifier of the entry being edited.
            existing_images: Images the entry keeps. Defaults to the
                edited entry's current images.
            removed_images: Images to delete from the entry and the store.
            uploads: New images to store and append.

        Raises:
            InvalidEntry: If validation or an upload fails. Nothing is
                written and uploads from this call are discarded.
            StorageUnavailable: If the entry file can't be written.
        """
        if quick_tags is not None or tags:
            content = compose_content(quick_tags, unique_tags(tags or []), content)

        errors = self.validate(entry_date, entry_time, title, content, original_identifier)

        stored: list[str] = []
        if not errors:
            for upload in uploads:
                try:
                    stored.append(self.images.upload(upload))
                except ImageError as e:
                    errors.append(str(e))

        if errors:
            if stored:
                self.images.remove_all(stored)
            raise InvalidEntry(errors)

        if existing_images is None:
            previous = self.store.load(original_identifier) if original_identifier else None
            existing_images = previous.images if previous else []

        removed_images = list(removed_images)
        images = self.images.merge(existing_images, removed_images, stored)
        identifier = fn.encode(entry_date, entry_time)
        record = Record(title=title.strip(), images=images, body=content)
        try:
            entry = self.store.save(identifier, record, previous=original_identifier)
        except StorageUnavailable:
            if stored:
                self.images.remove_all(stored)
            raise

        if removed_images:
            self.images.remove_all(removed_images)
        logger.info(f"Saved diary entry {identifier}")
        return entry

    def delete_entry(self, identifier: str) -> bool:
        """Delete an entry and its images. Returns False if it didn't exist."""
        deleted = self.store.delete(identifier)
        if deleted:
            logger.info(f"Deleted diary entry {identifier}")
        return deleted

    # -- Queries ------------------------------------------------------------

    def get(self, identifier: str) -> Entry | None:
        return self.query.get(identifier)

    def list_all(self) -> list[Entry]:
        return self.query.list_all()

    def search(self, keyword: str) -> list[Entry]:
        return self.query.search(keyword)

    def filter_by_tag(self, tag: str) -> list[Entry]:
        return self.query.filter_by_tag(tag)

    def filter_by_month(self, year: int, month: int) -> list[Entry]:
        return self.query.filter_by_month(year, month)

    def filter_by_date(self, entry_date: date | str) -> list[Entry]:
        return self.query.filter_by_date(entry_date)

    def memories(self, reference_date: date | str | None = None) -> list[Memory]:
        return self.query.memories(reference_date)

    def tag_cloud(self) -> list[TagCount]:
        return self.query.tag_cloud()

    def months(self) -> list[tuple[str, int]]:
        return self.query.months()

    def preview(self, entry: Entry) -> str:
        """Listing preview of *entry* at the configured length."""
        return entry.preview(self.preview_length)

    def page(self, items: list, page: int = 1) -> Page:
        """Paginate *items* with the configured page size."""
        return self.query.paginate(items, page, self.entries_per_page)
