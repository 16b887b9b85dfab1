"""Entry store: one UTF-8 text file per entry in a flat directory.

Files are named ``<YYYY-MM-DD>_<HHMM>.txt`` and hold a record as laid out by
:mod:`daybook.journal.record`. Nothing is cached; every call goes to disk.

Writers take an exclusive ``flock`` on the target file for the duration of
the write. Readers never lock, so a reader racing a writer may see a
truncated file for a moment.
"""

from __future__ import annotations

import fcntl
import os
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO

from loguru import logger

from daybook.core.exceptions import InvalidFormat, NotFound, StorageUnavailable

from . import filename as fn
from . import record as rc
from .images import ImageReferences
from .models import Entry

DEFAULT_LOCK_TIMEOUT = 1.0
_LOCK_RETRY_INTERVAL = 0.05


@contextmanager
def locked_for_write(path: Path, timeout: float = DEFAULT_LOCK_TIMEOUT) -> Iterator[IO[str]]:
    """Open *path* for writing under an exclusive advisory lock.

    The file is created if missing but only truncated once the lock is held.

    Raises:
        StorageUnavailable: If the file can't be opened or the lock isn't
            acquired within *timeout* seconds.
    """
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT, 0o644)
    except OSError as e:
        raise StorageUnavailable(f"Cannot open {path.name} for writing: {e}") from e

    f = os.fdopen(fd, "w", encoding="utf-8")
    try:
        deadline = time.monotonic() + timeout
        while True:
            try:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    raise StorageUnavailable(f"Timed out waiting for write lock on {path.name}") from None
                time.sleep(_LOCK_RETRY_INTERVAL)
            except OSError as e:
                raise StorageUnavailable(f"Cannot lock {path.name}: {e}") from e
        try:
            f.seek(0)
            f.truncate()
            yield f
            f.flush()
            os.fsync(f.fileno())
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    finally:
        f.close()


class EntryStore:
    """CRUD over a directory of entry files."""

    def __init__(
        self,
        entries_dir: str | Path,
        images: ImageReferences | None = None,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ) -> None:
        self.entries_dir = Path(entries_dir).expanduser()
        self.images = images or ImageReferences()
        self.lock_timeout = lock_timeout

    def _ensure_dir(self) -> None:
        try:
            self.entries_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(f"Cannot create entries directory {self.entries_dir}: {e}") from e

    def path_for(self, identifier: str) -> Path:
        """File path for *identifier*.

        Raises:
            InvalidFormat: If *identifier* is malformed.
        """
        return self.entries_dir / fn.to_filename(identifier)

    # -- Reads --------------------------------------------------------------

    def identifiers(self) -> list[str]:
        """Identifiers of every well-named entry file, in directory order."""
        if not self.entries_dir.is_dir():
            return []
        result = []
        for path in self.entries_dir.glob("*" + fn.ENTRY_SUFFIX):
            try:
                result.append(fn.from_filename(path.name))
            except InvalidFormat:
                logger.debug(f"Ignoring non-entry file {path.name}")
        return result

    def exists(self, identifier: str) -> bool:
        try:
            return self.path_for(identifier).is_file()
        except InvalidFormat:
            return False

    def read_raw(self, identifier: str) -> str | None:
        """Stored text for *identifier*, or None if there is no such file.

        A directory squatting on an entry file name counts as no file.
        """
        try:
            path = self.path_for(identifier)
        except InvalidFormat:
            return None
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except (FileNotFoundError, IsADirectoryError):
            return None

    def load(self, identifier: str) -> Entry | None:
        """Read and decode one entry. Returns None if it doesn't exist."""
        blob = self.read_raw(identifier)
        if blob is None:
            return None
        return self.to_entry(identifier, blob)

    def require(self, identifier: str) -> Entry:
        """Like :meth:`load` but raise when the entry is missing.

        Raises:
            NotFound: If there is no file for *identifier*.
        """
        entry = self.load(identifier)
        if entry is None:
            raise NotFound(f"Entry not found: {identifier}")
        return entry

    @staticmethod
    def to_entry(identifier: str, blob: str) -> Entry:
        entry_date, entry_time = fn.decode(identifier)
        record = rc.decode(blob)
        return Entry(
            identifier=identifier,
            date=entry_date,
            time=entry_time,
            title=record.title,
            images=record.images,
            raw_content=record.body,
        )

    # -- Writes -------------------------------------------------------------

    def save(self, identifier: str, record: rc.Record, *, previous: str | None = None) -> Entry:
        """Write *record* under *identifier*, overwriting any entry at that minute.

        When *previous* names a different identifier, its file is removed
        after the new file is written. A crash between the two steps leaves
        both files behind.

        Raises:
            InvalidFormat: If either identifier is malformed. Nothing is written.
            StorageUnavailable: On I/O or lock failure.
        """
        path = self.path_for(identifier)
        old_path = self.path_for(previous) if previous and previous != identifier else None

        self._ensure_dir()
        blob = rc.encode(record.title, record.images, record.body)
        try:
            with locked_for_write(path, self.lock_timeout) as f:
                f.write(blob)
        except OSError as e:
            raise StorageUnavailable(f"Failed to write {path.name}: {e}") from e
        logger.debug(f"Saved entry {identifier} ({len(blob)} chars)")

        if old_path is not None:
            self._remove_file(old_path)
            logger.info(f"Moved entry {previous} -> {identifier}")

        return self.to_entry(identifier, blob)

    def move(self, old_identifier: str, new_identifier: str) -> Entry:
        """Re-key an existing entry to a new date/time, keeping its images.

        Raises:
            NotFound: If *old_identifier* has no file.
        """
        entry = self.require(old_identifier)
        record = rc.Record(title=entry.title, images=list(entry.images), body=entry.raw_content)
        return self.save(new_identifier, record, previous=old_identifier)

    def delete(self, identifier: str) -> bool:
        """Remove an entry file and, best effort, every image it references.

        Returns False if there was no such entry. Image removal failures are
        logged and do not fail the delete.

        Raises:
            StorageUnavailable: If the entry file exists but can't be removed.
        """
        try:
            path = self.path_for(identifier)
        except InvalidFormat:
            return False
        entry = self.load(identifier)
        if entry is None:
            return False

        if not self._remove_file(path):
            return False
        logger.debug(f"Deleted entry {identifier}")

        if entry.images:
            failed = self.images.remove_all(entry.images)
            if failed:
                logger.warning(f"Entry {identifier}: {len(failed)} image(s) could not be removed")
        return True

    def _remove_file(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageUnavailable(f"Failed to remove {path.name}: {e}") from e
        return True
