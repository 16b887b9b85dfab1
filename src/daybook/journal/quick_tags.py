"""Quick-tag extraction from the top of an entry body.

An entry body may open with a block of metadata lines::

    Location: Lisbon
    Weather: Sunny
    Mood: Calm
    Plans: Museum
    Tags: travel, #family

    Free text starts here.

Only a contiguous block at the very top counts. Lines may appear in any
order, each key at most once. The first blank line, non-matching line or
repeated key ends the block; anything matching further down is ordinary text.
"""

from __future__ import annotations

import re

from .models import ParsedContent, QuickTags

_QUICK_TAG_KEYS = ("location", "weather", "mood", "plans")
_TAG_LINE_RE = re.compile(r"^(location|weather|mood|plans|tags):(.*)$", re.IGNORECASE)


def parse_tag_list(value: str) -> list[str]:
    """Split a ``Tags:`` value into tags: comma-separated, trimmed, ``#`` stripped."""
    tags = []
    for token in value.split(","):
        token = token.strip().lstrip("#").strip()
        if token:
            tags.append(token)
    return tags


def normalize_tag(tag: str) -> str:
    """Comparison key for an entry tag."""
    return (tag or "").strip().lstrip("#").strip().casefold()


def unique_tags(tags: list[str]) -> list[str]:
    """Drop case-insensitive duplicates, keeping the first spelling of each tag."""
    seen: set[str] = set()
    result = []
    for tag in tags:
        key = normalize_tag(tag)
        if key and key not in seen:
            seen.add(key)
            result.append(tag)
    return result


def extract(body: str) -> ParsedContent:
    """Split *body* into quick tags, entry tags and the remaining content."""
    if not body:
        return ParsedContent()

    lines = body.split("\n")
    values: dict[str, str] = {}
    idx = 0
    while idx < len(lines):
        line = lines[idx].strip()
        if not line:
            break
        m = _TAG_LINE_RE.match(line)
        if not m:
            break
        key, value = m.group(1).lower(), m.group(2).strip()
        # An empty value is not metadata, so the line stays in the text
        if key in values or not value or (key == "tags" and not parse_tag_list(value)):
            break
        values[key] = value
        idx += 1

    if idx == 0:
        return ParsedContent(content=body)

    # Blank lines separating the block from the text belong to the block
    while idx < len(lines) and not lines[idx].strip():
        idx += 1

    quick = QuickTags(**{k: values.get(k) or None for k in _QUICK_TAG_KEYS})
    tags = parse_tag_list(values.get("tags", ""))
    return ParsedContent(quick_tags=quick, tags=tags, content="\n".join(lines[idx:]))


def format_quick_tags(quick_tags: QuickTags | None, tags: list[str] | None = None) -> str:
    """Render the metadata block in canonical order (no trailing newline)."""
    lines = []
    for key, value in (quick_tags or QuickTags()).as_dict().items():
        lines.append(f"{key.capitalize()}: {value.strip()}")
    clean_tags = parse_tag_list(",".join(tags or []))
    if clean_tags:
        lines.append(f"Tags: {', '.join(clean_tags)}")
    return "\n".join(lines)


def compose_content(quick_tags: QuickTags | None, tags: list[str] | None, text: str) -> str:
    """Build a body from structured fields and free text, the inverse of :func:`extract`."""
    block = format_quick_tags(quick_tags, tags)
    if not block:
        return text or ""
    if not text:
        return block
    return f"{block}\n\n{text}"
