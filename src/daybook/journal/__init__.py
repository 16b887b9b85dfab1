"""Flat-file diary: entry storage, record format and queries.

Each entry is one text file named after its date and minute. Queries scan
the whole directory on every call; there is no index and no cache.
"""

from .diary import Diary
from .image_store import LocalImageStore
from .images import ImageProcessor, ImageReferences, Upload
from .models import Entry, Memory, Page, ParsedContent, QuickTags, TagCount
from .query import QueryEngine, paginate, years_before
from .record import Record
from .store import EntryStore

__all__ = [
    "Diary",
    "Entry",
    "EntryStore",
    "ImageProcessor",
    "ImageReferences",
    "LocalImageStore",
    "Memory",
    "Page",
    "ParsedContent",
    "QueryEngine",
    "QuickTags",
    "Record",
    "TagCount",
    "Upload",
    "paginate",
    "years_before",
]
