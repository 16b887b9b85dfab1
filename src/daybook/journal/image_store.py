"""Local filesystem image store.

Default :class:`~daybook.journal.images.ImageProcessor`: keeps uploaded
images as opaque files in one directory. It checks type and size and sniffs
the file signature, but never re-encodes the bytes.
"""

from __future__ import annotations

import time
import uuid
from pathlib import Path

from loguru import logger

from daybook.core.config import DEFAULT_ALLOWED_IMAGE_TYPES, DEFAULT_MAX_IMAGE_SIZE
from daybook.core.exceptions import ImageDecodeError, ImageTooLarge, StorageUnavailable, UnsupportedImage

from .images import safe_name

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


def sniff_mime_type(data: bytes) -> str | None:
    """Detect the image format from the leading magic bytes."""
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


class LocalImageStore:
    """Stores images as files under ``base_path``."""

    def __init__(
        self,
        base_path: str | Path,
        max_size: int = DEFAULT_MAX_IMAGE_SIZE,
        allowed_types: list[str] | None = None,
    ):
        self.base_path = Path(base_path).expanduser()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.max_size = max_size
        self.allowed_types = [t.lower() for t in (allowed_types or DEFAULT_ALLOWED_IMAGE_TYPES)]

    def path_for(self, filename: str) -> Path | None:
        """Absolute path of a stored image, or None for an unusable name."""
        name = safe_name(filename)
        return self.base_path / name if name else None

    def exists(self, filename: str) -> bool:
        path = self.path_for(filename)
        return path is not None and path.is_file()

    def process_upload(self, data: bytes, declared_mime_type: str) -> str:
        mime_type = (declared_mime_type or "").split(";")[0].strip().lower()
        if mime_type not in self.allowed_types or mime_type not in _EXTENSIONS:
            raise UnsupportedImage(f"Invalid image type: {declared_mime_type!r}")
        if len(data) > self.max_size:
            raise ImageTooLarge(f"Image size must be less than {self.max_size // (1024 * 1024)}MB")

        detected = sniff_mime_type(data)
        if detected is None:
            raise ImageDecodeError("Upload is not a recognizable image")
        if detected != mime_type:
            if detected not in self.allowed_types:
                raise UnsupportedImage(f"Invalid image type: {detected!r}")
            logger.debug(f"Declared {mime_type} but content is {detected}; using detected type")

        filename = f"{uuid.uuid4().hex}_{int(time.time())}.{_EXTENSIONS[detected]}"
        path = self.base_path / filename
        try:
            path.write_bytes(data)
        except OSError as e:
            raise StorageUnavailable(f"Failed to save image {filename}: {e}") from e
        logger.debug(f"Stored image {filename} ({len(data)} bytes)")
        return filename

    def delete_stored(self, stored_filename: str) -> bool:
        path = self.path_for(stored_filename)
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"Deleted image {path.name}")
        return True
