"""Sanitisation helpers.

Free-text fields (check-in notes, journal titles and bodies, display
names) are stripped of HTML tags before they are stored. Tags and room
codes get their own normalisers so lookups and comparisons behave the
same no matter how the client typed them.
"""
import re
from typing import Iterable, Optional

TAG_RE = re.compile(r"<[^>]+>")


def strip_tags(text: Optional[str]) -> str:
    """Remove HTML tags from the given string.

    Parameters
    ----------
    text: str | None
        The input string that may contain HTML tags.

    Returns
    -------
    str
        The cleaned string with tags removed and whitespace trimmed.
        ``None`` and empty input give ``""``.
    """
    if not text:
        return ""
    return TAG_RE.sub("", text).strip()


def normalize_tags(tags: Optional[Iterable[str]]) -> list[str]:
    """Clean a tag list, dropping blanks and repeats but keeping order."""
    cleaned: list[str] = []
    for tag in tags or ():
        tag = strip_tags(tag)
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def normalize_room_code(code: Optional[str]) -> str:
    """Room codes are compared trimmed and upper-cased."""
    return (code or "").strip().upper()
