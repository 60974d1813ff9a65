from __future__ import annotations

import re
from datetime import date, datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

from dateutil import parser as _dtparser

from .utils import now_utc

# Postings older than this are treated as stale and get no date at all.
MAX_AGE_DAYS = 730

_ALREADY_HUMAN_RE = re.compile(r"^\s*(?:\d+\+?\s+\w+\s+ago|today|yesterday|just posted|recently posted)\s*$", re.I)


def parse_posted(value: Any) -> datetime | None:
    """
    Best-effort parse into an aware UTC datetime.

    Accepts datetime/date objects, epoch seconds or milliseconds (int/float or
    digit strings), ISO-8601, RFC 2822 (RSS pubDate) and anything dateutil
    understands. Returns None when nothing works.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        dt = _from_epoch(float(value))
    else:
        s = str(value).strip()
        if not s:
            return None
        if re.fullmatch(r"\d{9,13}(?:\.\d+)?", s):
            dt = _from_epoch(float(s))
        else:
            dt = _parse_text(s)

    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _from_epoch(ts: float) -> datetime | None:
    # Millisecond timestamps (Lever createdAt, some RSS generators)
    if ts > 1e12:
        ts /= 1000.0
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _parse_text(s: str) -> datetime | None:
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(s)
    except (TypeError, ValueError, IndexError):
        pass
    try:
        return _dtparser.parse(s)
    except (ValueError, OverflowError, _dtparser.ParserError):
        return None


def humanize_date(value: Any, now: datetime | None = None) -> str | None:
    """
    Relative, human-readable posting age.

        today            -> "Today"
        1 day            -> "Yesterday"
        2..6 days        -> "N days ago"
        7..29 days       -> "N weeks ago"
        30 days..2 years -> "N months ago"
        older / invalid  -> None
        in the future    -> "Recently posted" (provider clock skew)

    Strings a provider already humanized ("3 days ago") pass through unchanged.
    """
    if isinstance(value, str) and _ALREADY_HUMAN_RE.match(value):
        return value.strip()

    posted = parse_posted(value)
    if posted is None:
        return None

    ref = now or now_utc()
    if ref.tzinfo is None:
        ref = ref.replace(tzinfo=timezone.utc)

    delta = ref - posted
    if delta.total_seconds() < 0:
        return "Recently posted"

    days = delta.days
    if days > MAX_AGE_DAYS:
        return None
    if days == 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        return _plural(days // 7, "week")
    return _plural(days // 30, "month")


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit} ago" if n == 1 else f"{n} {unit}s ago"
