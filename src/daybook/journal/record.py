"""Record codec: the on-disk text layout of one entry.

A record is three newline-separated parts::

    <title>
    <JSON array of image filenames>
    <body, which may itself span many lines>

Decoding is lenient. A missing or broken image line becomes ``[]`` and a
missing body becomes ``""``; :func:`decode` never raises.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from loguru import logger

from daybook.core.exceptions import DecodeError
from daybook.core.utils.text import normalize_newlines


@dataclass
class Record:
    """Decoded fields of a stored entry blob."""

    title: str = ""
    images: list[str] = field(default_factory=list)
    body: str = ""
    images_valid: bool = True

    def as_tuple(self) -> tuple[str, list[str], str]:
        return self.title, self.images, self.body


def encode(title: str, images: list[str] | None, body: str) -> str:
    """Serialize an entry into its stored text form.

    Newlines inside *title* are collapsed to spaces so the title always
    occupies exactly the first line.
    """
    title_line = normalize_newlines(title or "").replace("\n", " ")
    images_line = json.dumps([str(name) for name in (images or [])], ensure_ascii=False)
    return f"{title_line}\n{images_line}\n{body or ''}"


def _decode_images(line: str) -> tuple[list[str], bool]:
    try:
        decoded = json.loads(line)
    except (json.JSONDecodeError, ValueError):
        return [], False
    if not isinstance(decoded, list):
        return [], False
    return [item for item in decoded if isinstance(item, str)], True


def decode(blob: str) -> Record:
    """Parse a stored blob, degrading gracefully on malformed input."""
    if not blob:
        return Record(images_valid=False)

    parts = blob.split("\n", 2)
    title = parts[0].rstrip("\r")

    images: list[str] = []
    images_valid = False
    if len(parts) > 1:
        images, images_valid = _decode_images(parts[1].rstrip("\r"))
        if not images_valid:
            logger.debug(f"Malformed image list in record titled {title!r}; using []")

    body = parts[2] if len(parts) > 2 else ""
    return Record(title=title, images=images, body=body, images_valid=images_valid)


def decode_strict(blob: str) -> Record:
    """Like :func:`decode` but raise on a missing or malformed image line.

    Raises:
        DecodeError: If the blob lacks a valid JSON list on its second line.
    """
    record = decode(blob)
    if not record.images_valid:
        raise DecodeError("Record has no valid image list on its second line")
    return record
