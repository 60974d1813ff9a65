from __future__ import annotations

import logging
from typing import Any

import requests

from ..credentials import APIConfig
from ..http_client import describe_error
from ..identifiers import career_page_urls
from ..models import JobResult
from ..normalize import make_job
from .base import HttpProviderMixin, ProviderError, as_list
from .registry import register

log = logging.getLogger(__name__)

DIFFBOT_URL = "https://api.diffbot.com/v3/analyze"
DIFFBOT_FIELDS = "objects.title,objects.location,objects.summary,objects.skills"
MAX_URLS = 4
MAX_OBJECTS = 5


@register
class CareerPagesProvider(HttpProviderMixin):
    """
    Guessed career pages run through Diffbot's Analyze API. URLs are tried in
    order; the first page that yields titled objects wins.
    """

    name = "career_pages"
    source = "Company Careers (Diffbot)"
    credentials = ("diffbot",)

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        urls = career_page_urls(company_name)[:MAX_URLS]
        reasons: list[str] = []
        for page in urls:
            params = {"token": config.get("diffbot"), "url": page, "fields": DIFFBOT_FIELDS}
            try:
                data = await self._client.aget_json(DIFFBOT_URL, params=params)
            except (requests.RequestException, ValueError) as e:
                reasons.append(describe_error(e))
                log.debug("diffbot %s failed: %s", page, reasons[-1])
                continue
            objects = as_list(data, "objects")[:MAX_OBJECTS]
            jobs = [self._map(o, page, company_name) for o in objects if o.get("title")]
            if jobs:
                return jobs
        if len(reasons) == len(urls):
            raise ProviderError(f"no career page analyzable ({'; '.join(reasons)})")
        return []

    def _map(self, obj: dict[str, Any], page: str, company_name: str) -> JobResult:
        return make_job(
            title=obj.get("title"),
            location=obj.get("location"),
            source_url=page,
            company=company_name,
            ats_source="Company Career Page",
            description=obj.get("summary"),
            description_limit=self.settings.description_limit,
            skills=obj.get("skills"),
        )
