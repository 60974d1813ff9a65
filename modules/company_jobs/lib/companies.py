"""
Static company knowledge used around the search.

- KNOWN_COMPANIES: the deliberately small allow-list that enables the
  "known company" stage. Matching is a plain substring test on the lowercased
  input, nothing smarter.
- KNOWN_CAREER_PAGES: canonical careers URLs for the career-page suggestion.
- DIRECTORY + suggest_companies(): the autocomplete lookup used by callers
  (UI/CLI), not by the orchestrator.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any

from rapidfuzz.distance import Levenshtein

KNOWN_COMPANIES: tuple[str, ...] = ("netflix", "google", "apple", "microsoft", "meta", "amazon", "tesla")

KNOWN_CAREER_PAGES: dict[str, tuple[str, str]] = {
    "google": ("https://careers.google.com", "Google"),
    "apple": ("https://jobs.apple.com", "Apple"),
    "microsoft": ("https://careers.microsoft.com", "Microsoft"),
    "meta": ("https://careers.meta.com", "Meta"),
    "facebook": ("https://careers.meta.com", "Meta (Facebook)"),
    "amazon": ("https://amazon.jobs", "Amazon"),
    "netflix": ("https://jobs.netflix.com", "Netflix"),
    "tesla": ("https://careers.tesla.com", "Tesla"),
    "uber": ("https://careers.uber.com", "Uber"),
    "airbnb": ("https://careers.airbnb.com", "Airbnb"),
    "spotify": ("https://careers.spotify.com", "Spotify"),
    "stripe": ("https://stripe.com/jobs", "Stripe"),
    "shopify": ("https://careers.shopify.com", "Shopify"),
    "salesforce": ("https://careers.salesforce.com", "Salesforce"),
    "oracle": ("https://careers.oracle.com", "Oracle"),
    "ibm": ("https://careers.ibm.com", "IBM"),
    "intel": ("https://careers.intel.com", "Intel"),
    "nvidia": ("https://careers.nvidia.com", "NVIDIA"),
    "adobe": ("https://careers.adobe.com", "Adobe"),
    "zoom": ("https://careers.zoom.us", "Zoom"),
}


def is_known_company(company_name: str, known: Iterable[str] = KNOWN_COMPANIES) -> bool:
    """True when any allow-listed name is a substring of the lowercased input."""
    name = (company_name or "").lower()
    return any(k and k.lower() in name for k in known)


def known_career_page(company_name: str) -> tuple[str, str] | None:
    """(url, display name) for an exact (case-insensitive) directory hit."""
    return KNOWN_CAREER_PAGES.get((company_name or "").lower().strip())


# ---------------------------------------------------------------------------
# Company suggestions
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class CompanySuggestion:
    name: str
    domain: str | None = None
    industry: str | None = None
    size: str | None = None
    location: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def _c(name: str, domain: str, industry: str, size: str, location: str | None = None) -> CompanySuggestion:
    return CompanySuggestion(name=name, domain=domain, industry=industry, size=size, location=location)


DIRECTORY: tuple[CompanySuggestion, ...] = (
    # Big tech
    _c("Google", "google.com", "Technology", "Large", "Mountain View, CA"),
    _c("Microsoft", "microsoft.com", "Technology", "Large", "Redmond, WA"),
    _c("Apple", "apple.com", "Technology", "Large", "Cupertino, CA"),
    _c("Amazon", "amazon.com", "E-commerce", "Large", "Seattle, WA"),
    _c("Meta", "meta.com", "Social Media", "Large", "Menlo Park, CA"),
    _c("Netflix", "netflix.com", "Entertainment", "Large", "Los Gatos, CA"),
    _c("Tesla", "tesla.com", "Automotive", "Large", "Austin, TX"),
    _c("Nvidia", "nvidia.com", "Technology", "Large", "Santa Clara, CA"),
    _c("Intel", "intel.com", "Technology", "Large", "Santa Clara, CA"),
    _c("IBM", "ibm.com", "Technology", "Large", "Armonk, NY"),
    _c("Oracle", "oracle.com", "Technology", "Large", "Austin, TX"),
    _c("Salesforce", "salesforce.com", "Software", "Large", "San Francisco, CA"),
    _c("Adobe", "adobe.com", "Software", "Large", "San Jose, CA"),
    # Fintech
    _c("Stripe", "stripe.com", "Fintech", "Large", "San Francisco, CA"),
    _c("Square", "squareup.com", "Fintech", "Large", "San Francisco, CA"),
    _c("PayPal", "paypal.com", "Fintech", "Large", "San Jose, CA"),
    _c("Coinbase", "coinbase.com", "Fintech", "Medium"),
    _c("Robinhood", "robinhood.com", "Fintech", "Medium", "Menlo Park, CA"),
    _c("Plaid", "plaid.com", "Fintech", "Medium", "San Francisco, CA"),
    _c("Chime", "chime.com", "Fintech", "Medium", "San Francisco, CA"),
    _c("Affirm", "affirm.com", "Fintech", "Medium", "San Francisco, CA"),
    _c("Klarna", "klarna.com", "Fintech", "Medium", "Stockholm, Sweden"),
    # AI
    _c("OpenAI", "openai.com", "AI", "Medium", "San Francisco, CA"),
    _c("Anthropic", "anthropic.com", "AI", "Medium", "San Francisco, CA"),
    _c("Stability AI", "stability.ai", "AI", "Small", "London, UK"),
    _c("Hugging Face", "huggingface.co", "AI", "Small", "New York, NY"),
    _c("Scale AI", "scale.com", "AI", "Medium", "San Francisco, CA"),
    # Consumer / marketplaces
    _c("Uber", "uber.com", "Transportation", "Large", "San Francisco, CA"),
    _c("Airbnb", "airbnb.com", "Travel", "Large", "San Francisco, CA"),
    _c("Spotify", "spotify.com", "Entertainment", "Large", "Stockholm, Sweden"),
    _c("Shopify", "shopify.com", "E-commerce", "Large", "Ottawa, Canada"),
    _c("DoorDash", "doordash.com", "Delivery", "Large", "San Francisco, CA"),
    _c("Instacart", "instacart.com", "Delivery", "Large", "San Francisco, CA"),
    _c("Pinterest", "pinterest.com", "Social Media", "Large", "San Francisco, CA"),
    _c("Snap", "snap.com", "Social Media", "Large", "Santa Monica, CA"),
    _c("Zoom", "zoom.us", "Software", "Large", "San Jose, CA"),
    # Developer tools / SaaS
    _c("Atlassian", "atlassian.com", "Software", "Large", "Sydney, Australia"),
    _c("Datadog", "datadoghq.com", "Software", "Large", "New York, NY"),
    _c("GitLab", "gitlab.com", "Software", "Medium"),
    _c("Figma", "figma.com", "Software", "Medium", "San Francisco, CA"),
    _c("Notion", "notion.so", "Software", "Medium", "San Francisco, CA"),
    _c("Vercel", "vercel.com", "Software", "Small"),
)

_TLD_RE = re.compile(r"\.(com|org|net|io|co|ai|us|so)$")


def suggest_companies(
    query: str,
    limit: int = 8,
    directory: Iterable[CompanySuggestion] = DIRECTORY,
) -> list[CompanySuggestion]:
    """
    Ranked autocomplete over the static directory:
    exact > prefix > contains > near-miss (edit distance) > domain match.
    """
    q = (query or "").lower().strip()
    if not q:
        return []
    entries = list(directory)

    exact = [c for c in entries if c.name.lower() == q]
    prefix = [c for c in entries if c.name.lower().startswith(q) and c.name.lower() != q]
    contains = [c for c in entries if q in c.name.lower() and not c.name.lower().startswith(q)]

    threshold = max(1, len(q) // 3)
    fuzzy = []
    for c in entries:
        name = c.name.lower()
        if q in name or name in q or abs(len(name) - len(q)) > 3:
            continue
        if 0 < Levenshtein.distance(q, name, score_cutoff=threshold) <= threshold:
            fuzzy.append(c)

    domain = []
    for c in entries:
        if not c.domain:
            continue
        stem = _TLD_RE.sub("", c.domain.lower())
        if q in stem or stem in q:
            domain.append(c)

    seen: set[str] = set()
    out: list[CompanySuggestion] = []
    for c in exact + prefix + contains + fuzzy + domain:
        key = c.name.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(c)
        if len(out) >= limit:
            break
    return out
