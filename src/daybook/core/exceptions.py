"""
Daybook exception hierarchy.

All daybook exceptions inherit from DaybookError, making it easy for consumers
to catch library-level errors while still distinguishing specific failure modes.
"""


class DaybookError(Exception):
    """Base exception class for all daybook errors."""


class ConfigurationError(DaybookError):
    """Raised for configuration errors (missing keys, invalid values)."""


class InvalidFormat(DaybookError, ValueError):
    """Raised for a malformed identifier, date, time or title. Nothing is written."""


class InvalidEntry(InvalidFormat):
    """Raised when a submitted entry fails validation.

    Collects every problem found so callers can report them together.
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(" ".join(self.errors))


class DecodeError(DaybookError):
    """Raised for a malformed stored record when strict decoding is requested."""


class NotFound(DaybookError, KeyError):
    """Raised when no entry file exists for an identifier."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class StorageUnavailable(DaybookError):
    """Raised for I/O or lock failures during a mutation."""


class OrphanReference(DaybookError):
    """Raised when a referenced image is missing from the image store."""


class ImageError(DaybookError):
    """Base class for image upload failures."""


class UnsupportedImage(ImageError):
    """Raised for an upload whose MIME type is not allowed."""


class ImageTooLarge(ImageError):
    """Raised for an upload larger than the configured limit."""


class ImageDecodeError(ImageError):
    """Raised when upload bytes do not look like the declared image format."""
