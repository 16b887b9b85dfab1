"""Filename codec: (date, time) <-> entry identifier.

An identifier looks like ``2024-03-01_0930``; the entry file adds ``.txt``.
All fields are fixed-width and zero-padded, so sorting identifiers as plain
strings sorts entries chronologically.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time

from daybook.core.exceptions import InvalidFormat

ENTRY_SUFFIX = ".txt"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")
_IDENTIFIER_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})_(\d{2})(\d{2})$")


def is_valid_date(value: str) -> bool:
    """Return True if *value* is a real calendar date written as YYYY-MM-DD."""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def is_valid_time(value: str) -> bool:
    """Return True if *value* is a 24-hour HH:MM time."""
    return isinstance(value, str) and bool(_TIME_RE.match(value))


def parse_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not is_valid_date(value):
        raise InvalidFormat(f"Invalid date {value!r}, expected YYYY-MM-DD")
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_time(value: time | str) -> time:
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if not is_valid_time(value):
        raise InvalidFormat(f"Invalid time {value!r}, expected HH:MM")
    hour, minute = value.split(":")
    return time(int(hour), int(minute))


def encode(entry_date: date | str, entry_time: time | str) -> str:
    """Build the identifier for an entry written at *entry_date* / *entry_time*.

    Raises:
        InvalidFormat: If the date or time is malformed.
    """
    d = parse_date(entry_date)
    t = parse_time(entry_time)
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}_{t.hour:02d}{t.minute:02d}"


def decode(identifier: str) -> tuple[date, time]:
    """Split an identifier back into its date and time.

    Raises:
        InvalidFormat: If *identifier* is not ``YYYY-MM-DD_HHMM`` or names
            an impossible date or time.
    """
    m = _IDENTIFIER_RE.match(identifier) if isinstance(identifier, str) else None
    if not m:
        raise InvalidFormat(f"Invalid entry identifier {identifier!r}")
    date_part, hour, minute = m.groups()
    try:
        d = datetime.strptime(date_part, "%Y-%m-%d").date()
        t = time(int(hour), int(minute))
    except ValueError as e:
        raise InvalidFormat(f"Invalid entry identifier {identifier!r}: {e}") from e
    return d, t


def to_filename(identifier: str) -> str:
    """Entry file name for *identifier*."""
    decode(identifier)
    return identifier + ENTRY_SUFFIX


def from_filename(filename: str) -> str:
    """Identifier for an entry file name.

    Raises:
        InvalidFormat: If the name has the wrong suffix or shape.
    """
    if not filename.endswith(ENTRY_SUFFIX):
        raise InvalidFormat(f"Not an entry file: {filename!r}")
    identifier = filename[: -len(ENTRY_SUFFIX)]
    decode(identifier)
    return identifier


def month_prefix(year: int, month: int) -> str:
    """Identifier prefix shared by every entry in *year*/*month*."""
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        raise InvalidFormat(f"Invalid month {year}-{month}")
    return f"{year:04d}-{month:02d}"
