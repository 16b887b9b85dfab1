"""Shared utilities: logging setup and text helpers."""

from .logging import setup_logging, setup_logging_from_config
from .text import normalize_newlines, truncate_text

__all__ = ["normalize_newlines", "setup_logging", "setup_logging_from_config", "truncate_text"]
