from __future__ import annotations

import logging
from typing import Any

import requests

from ..credentials import APIConfig
from ..http_client import describe_error
from ..models import JobResult
from ..normalize import make_job
from .base import HttpProviderMixin, ProviderError, as_list
from .registry import register
from .text import extract_job_title, extract_location

log = logging.getLogger(__name__)

CSE_URL = "https://www.googleapis.com/customsearch/v1"
MAX_QUERIES = 2  # free tier is 100 queries/day
ITEMS_PER_QUERY = 5


def search_queries(company_name: str) -> list[str]:
    return [
        f'"{company_name}" jobs site:linkedin.com/jobs',
        f'"{company_name}" careers "apply now"',
        f'"{company_name}" "we\'re hiring" -indeed -linkedin',
        f'intitle:"jobs at {company_name}"',
    ]


@register
class GoogleSearchProvider(HttpProviderMixin):
    """Google Programmable Search (Custom Search JSON API); needs an API key and an engine id."""

    name = "google_search"
    source = "Google Custom Search"
    credentials = ("google_cse_key", "google_cse_id")

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        jobs: list[JobResult] = []
        reasons: list[str] = []
        queries = search_queries(company_name)[:MAX_QUERIES]
        for q in queries:
            params = {"key": config.get("google_cse_key"), "cx": config.get("google_cse_id"), "q": q}
            try:
                data = await self._client.aget_json(CSE_URL, params=params)
            except (requests.RequestException, ValueError) as e:
                reasons.append(describe_error(e))
                log.debug("query %r failed: %s", q, reasons[-1])
                continue
            jobs.extend(self._map(item, company_name) for item in as_list(data, "items")[:ITEMS_PER_QUERY])
        if len(reasons) == len(queries):
            raise ProviderError("; ".join(reasons))
        return jobs

    def _map(self, item: dict[str, Any], company_name: str) -> JobResult:
        snippet = item.get("snippet")
        return make_job(
            title=extract_job_title(item.get("title")),
            default_title="Career Opportunity",
            location=extract_location(snippet),
            source_url=item.get("link"),
            company=company_name,
            ats_source="Google Search",
            description=snippet,
            description_limit=self.settings.description_limit,
            date_posted="Recently posted",
        )
