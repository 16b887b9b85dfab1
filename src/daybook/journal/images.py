"""Image reference management.

Entries only hold image *file names*. Storing, resizing and deleting the
image bytes is the job of an :class:`ImageProcessor`, which any image
backend can implement. :class:`ImageReferences` keeps the per-entry name
list consistent and talks to the processor.
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from loguru import logger

from daybook.core.exceptions import OrphanReference


@runtime_checkable
class ImageProcessor(Protocol):
    """Protocol for the image storage backend."""

    def process_upload(self, data: bytes, declared_mime_type: str) -> str:
        """Store uploaded bytes and return the stored file name.

        Raises:
            UnsupportedImage: The MIME type is not accepted.
            ImageTooLarge: The upload exceeds the size limit.
            ImageDecodeError: The bytes are not a readable image.
        """
        ...

    def delete_stored(self, stored_filename: str) -> bool:
        """Remove a stored image. Returns False if it was already absent."""
        ...


@dataclass
class Upload:
    """Raw bytes of one uploaded image plus the MIME type the client declared."""

    data: bytes
    mime_type: str
    original_name: str = ""


def safe_name(filename: str) -> str:
    """Reduce *filename* to its base name, dropping any directory part."""
    if not filename:
        return ""
    name = posixpath.basename(filename.replace("\\", "/").strip())
    return "" if name in (".", "..") else name


def dedupe(names: Iterable[str]) -> list[str]:
    """Order-preserving de-duplication of base names, empty names dropped."""
    seen: set[str] = set()
    result = []
    for name in names:
        name = safe_name(name)
        if name and name not in seen:
            seen.add(name)
            result.append(name)
    return result


class ImageReferences:
    """Maintains entry image lists on top of an :class:`ImageProcessor`."""

    def __init__(self, processor: ImageProcessor | None = None):
        self.processor = processor

    def upload(self, upload: Upload) -> str:
        """Hand one upload to the processor and return the stored name."""
        if self.processor is None:
            raise RuntimeError("No image processor configured")
        return safe_name(self.processor.process_upload(upload.data, upload.mime_type))

    def remove(self, filename: str) -> bool:
        """Delete one stored image.

        Returns False when the name is empty, no processor is configured,
        or the file was already gone.
        """
        name = safe_name(filename)
        if not name or self.processor is None:
            return False
        return self.processor.delete_stored(name)

    def remove_all(self, images: Iterable[str]) -> list[str]:
        """Best-effort delete of every image in *images*.

        Failures are logged, never raised, and do not stop the remaining
        removals. Returns the names that could not be removed (missing or
        failing).
        """
        failed = []
        for name in dedupe(images):
            try:
                if not self.remove(name):
                    raise OrphanReference(f"referenced image {name!r} is missing")
            except OrphanReference as e:
                logger.warning(f"Skipping image removal: {e}")
                failed.append(name)
            except Exception as e:
                logger.warning(f"Failed to remove image {name!r}: {type(e).__name__}: {e}")
                failed.append(name)
        return failed

    def merge(
        self,
        existing: Iterable[str],
        removed: Iterable[str] = (),
        uploaded: Iterable[str] = (),
    ) -> list[str]:
        """Compute an entry's new image list after an edit.

        Names in *removed* are dropped from the list and *uploaded* names are
        appended after the surviving ones. Nothing is deleted here; callers
        pass *removed* to :meth:`remove_all` once the entry is written.
        """
        removed_names = set(dedupe(removed))
        kept = [name for name in dedupe(existing) if name not in removed_names]
        return dedupe([*kept, *uploaded])
