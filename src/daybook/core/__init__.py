"""Core infrastructure: exceptions, configuration and logging."""

from .config import Config, get_config, reset_config
from .exceptions import (
    ConfigurationError,
    DaybookError,
    DecodeError,
    ImageDecodeError,
    ImageError,
    ImageTooLarge,
    InvalidEntry,
    InvalidFormat,
    NotFound,
    OrphanReference,
    StorageUnavailable,
    UnsupportedImage,
)

__all__ = [
    "Config",
    "ConfigurationError",
    "DaybookError",
    "DecodeError",
    "ImageDecodeError",
    "ImageError",
    "ImageTooLarge",
    "InvalidEntry",
    "InvalidFormat",
    "NotFound",
    "OrphanReference",
    "StorageUnavailable",
    "UnsupportedImage",
    "get_config",
    "reset_config",
]
