"""String and date helpers shared by services."""

from __future__ import annotations

import calendar
import html
import re
import unicodedata
from datetime import datetime

_TAG_RE = re.compile(r"<[^>]+>")
_NON_WORD_RE = re.compile(r"[^\w-]+")
_DASHES_RE = re.compile(r"-{2,}")


def slugify(text: str) -> str:
    """Lowercase URL slug: ``"Rock & Roll!"`` -> ``"rock-and-roll"``."""
    normalized = (
        unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    )
    slug = normalized.strip().lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = slug.replace("&", "-and-")
    slug = _NON_WORD_RE.sub("", slug).replace("_", "-")
    slug = _DASHES_RE.sub("-", slug)
    return slug.strip("-")


def truncate(text: str, length: int, suffix: str = "...") -> str:
    if len(text) <= length:
        return text
    return text[: max(length - len(suffix), 0)].rstrip() + suffix


def strip_html(text: str) -> str:
    """Remove markup and collapse whitespace."""
    return " ".join(html.unescape(_TAG_RE.sub(" ", text)).split())


def word_count(text: str) -> int:
    return len(strip_html(text).split())


def add_months(value: datetime, months: int) -> datetime:
    """Shift *value* by calendar months, clamping the day to month end."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
