"""Text helpers shared by the record codec and previews."""


def normalize_newlines(text: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    if not text:
        return ""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def truncate_text(text: str, max_length: int = 150, ellipsis: str = "...") -> str:
    """Truncate text to max_length characters, appending ellipsis if truncated."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length] + ellipsis
