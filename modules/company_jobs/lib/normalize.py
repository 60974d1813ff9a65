"""
Normalization & dedup for provider output.

Adapters map their raw payloads through make_job() so every JobResult carries
the same required fields and defaults. The orchestrator then runs
merge_results() once over everything it accumulated:

    concrete = filter_concrete(jobs)      # drop placeholder/aggregate postings
    unique   = dedupe(concrete)           # first occurrence wins

Generic postings are not thrown away blindly: collect_suggestions() keeps them
as a last-resort hint for searches that found nothing concrete.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Any

from .dates import humanize_date
from .models import JobResult
from .utils import clean_str

DEFAULT_TITLE = "Unknown Position"
UNTITLED = "Untitled Position"
DEFAULT_LOCATION = "Location not specified"
DEFAULT_JOB_TYPE = "Full-time"
DEFAULT_COUNT = "1"
FALLBACK_URL = "#"
DESCRIPTION_LIMIT = 200

# Substrings that mark a title as a placeholder rather than a real opening
GENERIC_TITLE_PHRASES = (
    "join us",
    "careers at",
    "various open positions",
    "check career page",
    "career opportunity",
    "multiple positions",
)
GENERIC_TITLES = frozenset({"position available", "job opening", "untitled position"})
GENERIC_COUNTS = frozenset({"multiple", "various", "unknown"})

_SALARY_PATTERNS = (
    re.compile(r"\$[\d,]+(?:\s*-\s*\$?[\d,]+)?(?:\s*(?:per\s+year|/year|annually|pa))?", re.I),
    re.compile(r"[\d,]+k(?:\s*-\s*[\d,]+k)?(?:\s*(?:per\s+year|/year|annually|pa))?", re.I),
)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------
def truncate(text: str | None, limit: int = DESCRIPTION_LIMIT, *, ellipsis: bool = False) -> str | None:
    """Cut free text to `limit` chars; optional '...' marks the cut."""
    s = clean_str(text)
    if s is None:
        return None
    if limit <= 0 or len(s) <= limit:
        return s
    cut = s[:limit]
    return cut + "..." if ellipsis else cut


def strip_markup(text: str | None) -> str | None:
    """Drop HTML tags and squeeze whitespace (RSS/ATS descriptions)."""
    s = clean_str(text)
    if s is None:
        return None
    return clean_str(_WS_RE.sub(" ", _TAG_RE.sub(" ", s)))


def extract_salary(content: str | None) -> str | None:
    """First salary-looking fragment in free text, e.g. '$120,000 - $150,000'."""
    if not content:
        return None
    for pat in _SALARY_PATTERNS:
        m = pat.search(content)
        if m:
            return m.group(0).strip()
    return None


def _skills(value: Any) -> tuple[str, ...] | None:
    if not value:
        return None
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return None
    out = tuple(s for s in (clean_str(v) for v in value) if s)
    return out or None


def make_job(
    *,
    title: Any,
    company: Any,
    ats_source: str,
    location: Any = None,
    source_url: Any = None,
    count: Any = None,
    salary: Any = None,
    date_posted: Any = None,
    job_type: Any = None,
    description: Any = None,
    skills: Any = None,
    default_title: str = DEFAULT_TITLE,
    default_company: str = "",
    fallback_url: str = FALLBACK_URL,
    description_limit: int = DESCRIPTION_LIMIT,
    description_ellipsis: bool = False,
    humanize: bool = True,
) -> JobResult:
    """
    Build a JobResult with every required field filled.

    date_posted is humanized (see dates.humanize_date) unless humanize=False,
    which is for providers that already send display text.
    """
    posted = humanize_date(date_posted) if humanize else clean_str(date_posted)
    return JobResult(
        title=clean_str(title) or default_title,
        count=clean_str(count) or DEFAULT_COUNT,
        location=clean_str(location) or DEFAULT_LOCATION,
        source_url=clean_str(source_url) or fallback_url or FALLBACK_URL,
        company=clean_str(company) or clean_str(default_company) or "Unknown Company",
        ats_source=clean_str(ats_source) or "Unknown Source",
        salary=clean_str(salary),
        date_posted=posted,
        job_type=clean_str(job_type) or DEFAULT_JOB_TYPE,
        description=truncate(description, description_limit, ellipsis=description_ellipsis),
        skills=_skills(skills),
    )


# ---------------------------------------------------------------------------
# Generic detection
# ---------------------------------------------------------------------------
def is_generic(job: JobResult) -> bool:
    """
    True for placeholder/aggregate postings ("Various Open Positions",
    "Check Career Page", count "Multiple", ...) that carry no concrete opening.
    """
    title = (job.title or "").lower().strip()
    if any(p in title for p in GENERIC_TITLE_PHRASES):
        return True
    if title in GENERIC_TITLES:
        return True
    return (job.count or "").lower().strip() in GENERIC_COUNTS


def filter_concrete(jobs: Iterable[JobResult]) -> list[JobResult]:
    return [j for j in jobs if not is_generic(j)]


# ---------------------------------------------------------------------------
# Dedup
# ---------------------------------------------------------------------------
def dedupe_key(job: JobResult, *, include_company: bool = False) -> tuple[str, ...]:
    """
    Identity of a posting: lowercased, trimmed title + location, and optionally
    company. ats_source is deliberately not part of the key.
    """
    parts = [(job.title or "").lower().strip(), (job.location or "").lower().strip()]
    if include_company:
        parts.append((job.company or "").lower().strip())
    return tuple(parts)


def dedupe(jobs: Iterable[JobResult], *, include_company: bool = False) -> list[JobResult]:
    """
    Keep the first occurrence per dedupe_key, preserving input order.
    Input order therefore decides which provider's copy survives.
    """
    seen: set[tuple[str, ...]] = set()
    out: list[JobResult] = []
    for job in jobs:
        key = dedupe_key(job, include_company=include_company)
        if key in seen:
            continue
        seen.add(key)
        out.append(job)
    return out


def merge_results(jobs: Sequence[JobResult], *, include_company: bool = False) -> list[JobResult]:
    """Final pass: drop generic postings, then dedupe."""
    return dedupe(filter_concrete(jobs), include_company=include_company)


def collect_suggestions(jobs: Iterable[JobResult]) -> list[JobResult]:
    """
    The generic postings only, deduplicated by title + URL. Used as a fallback
    hint ("check the career page") when nothing concrete was found.
    """
    seen: set[tuple[str, str]] = set()
    out: list[JobResult] = []
    for job in jobs:
        if not is_generic(job):
            continue
        key = (job.title.lower().strip(), job.source_url.strip())
        if key in seen:
            continue
        seen.add(key)
        out.append(job)
    return out
