"""
Candidate identifiers for providers that key on a machine-friendly company name.

ATS boards are addressed by a slug ("acme-robotics", "acmerobotics", ...) and
career pages by a guessed domain. Adapters try the candidates in order and keep
the first one that answers, so the most literal forms come first and
suffix-stripped forms last.
"""

from __future__ import annotations

import re

from .utils import uniq_preserve_order

LEGAL_SUFFIXES = ("inc", "corp", "ltd", "llc", "company", "co")

_WS_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_NON_ALNUM_RUN_RE = re.compile(r"[^a-z0-9]+")


def generate_identifiers(company_name: str) -> list[str]:
    """
    Deterministic, deduplicated, ordered slug candidates for `company_name`.

    "Example Co., Inc." ->
        ["example co., inc.", "exampleco.,inc.", "example-co.,-inc.", ...,
         "example co", "exampleco", "example-co", "example_co", "example"]

    Legal suffixes are only dropped as separate words, so "Cisco" keeps its
    "co". Never empty: falls back to the lowercased input.
    """
    clean = (company_name or "").lower().strip()
    if not clean:
        return [(company_name or "").lower()]

    exact = [
        clean,
        _WS_RE.sub("", clean),
        _WS_RE.sub("-", clean),
        _WS_RE.sub("_", clean),
        _NON_ALNUM_RE.sub("", clean),
        _NON_ALNUM_RUN_RE.sub("-", clean).strip("-"),
    ]
    stripped: list[str] = []
    for words in _suffix_stripped(clean):
        stripped += [" ".join(words), "".join(words), "-".join(words), "_".join(words)]
    out = uniq_preserve_order(exact + stripped)
    return out or [clean]


def _suffix_stripped(clean: str) -> list[list[str]]:
    """
    Word lists with trailing legal suffixes removed one at a time
    ("example co inc" -> [example, co], [example]); never down to nothing.
    """
    words = [w for w in _NON_ALNUM_RUN_RE.split(clean) if w]
    out: list[list[str]] = []
    while len(words) > 1 and words[-1] in LEGAL_SUFFIXES:
        words = words[:-1]
        out.append(words)
    return out


def domain_stem(company_name: str) -> str:
    """Lowercased name with all whitespace removed, as used in guessed domains."""
    return _WS_RE.sub("", (company_name or "").lower().strip())


def career_page_urls(company_name: str) -> list[str]:
    """Guessed career-page URLs, most common layouts first."""
    d = domain_stem(company_name)
    return [
        f"https://careers.{d}.com",
        f"https://jobs.{d}.com",
        f"https://{d}.com/careers",
        f"https://{d}.com/jobs",
        f"https://{d}.com/work-with-us",
        f"https://{d}.com/join-us",
        f"https://www.{d}.com/careers",
        f"https://www.{d}.com/jobs",
        f"https://{d}.io/careers",
        f"https://{d}.co/careers",
    ]


def rss_feed_urls(company_name: str) -> list[str]:
    """Company feed guesses followed by general remote-job feeds."""
    d = domain_stem(company_name)
    return [
        f"https://careers.{d}.com/feed",
        f"https://jobs.{d}.com/rss",
        f"https://{d}.com/careers/feed",
        f"https://{d}.com/jobs.rss",
        "https://remotive.com/feed",
        "https://weworkremotely.com/categories/remote-programming-jobs.rss",
    ]
