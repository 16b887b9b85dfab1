"""daybook: a diary that keeps every entry in its own text file."""

from .journal import Diary, Entry, EntryStore, QueryEngine

__version__ = "0.1.0"

__all__ = ["Diary", "Entry", "EntryStore", "QueryEngine", "__version__"]
