"""Heuristics for pulling job fields out of free text (search snippets, feed items)."""

from __future__ import annotations

import re

# Search-result titles that look like a posting
TITLE_KEYWORDS = (
    "job", "position", "role", "opening", "career", "hiring",
    "engineer", "developer", "manager", "analyst", "specialist",
)
# Feed items worth keeping
FEED_KEYWORDS = ("job", "position", "hiring", "career", "opening", "role", "opportunity", "vacancy")

_LOCATION_PATTERNS = (
    re.compile(r"\b(?:in|at|located)\s+([A-Za-z\s,]+?)(?:\s*[.;|]|\s*$)", re.I),
    re.compile(r"([A-Za-z]+,\s*[A-Z]{2})\b"),
    re.compile(r"\b(Remote|Hybrid|On-site)\b", re.I),
)


def extract_job_title(text: str | None) -> str | None:
    """'Senior Engineer - Acme | LinkedIn' -> 'Senior Engineer'; None if it doesn't read like a job."""
    if not text:
        return None
    if not any(k in text.lower() for k in TITLE_KEYWORDS):
        return None
    title = text.split(" - ")[0].split(" | ")[0].strip()
    return title or None


def extract_location(text: str | None) -> str | None:
    if not text:
        return None
    for pat in _LOCATION_PATTERNS:
        m = pat.search(text)
        if m:
            loc = m.group(1).strip(" ,")
            if loc:
                return loc
    return None


def is_job_related(title: str | None) -> bool:
    t = (title or "").lower()
    return any(k in t for k in FEED_KEYWORDS)


def mentions_company(company_name: str, *texts: str | None) -> bool:
    """Case-insensitive containment in either direction against any of `texts`."""
    c = (company_name or "").lower().strip()
    if not c:
        return False
    for t in texts:
        s = (t or "").lower().strip()
        if s and (c in s or s in c):
            return True
    return False
