from __future__ import annotations

from typing import Any

from ..credentials import APIConfig
from ..models import JobResult
from ..normalize import UNTITLED, make_job
from ..utils import dig, first_str
from .base import HttpProviderMixin, as_list, probe_identifiers
from .registry import register


@register
class LeverProvider(HttpProviderMixin):
    """
    Lever postings API, probed by identifier:
      GET https://api.lever.co/v0/postings/<ident> -> [ {...}, ... ]
    createdAt is epoch milliseconds.
    """

    name = "lever"
    source = "Lever"
    POSTINGS_URL = "https://api.lever.co/v0/postings/{ident}"

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        async def board(ident: str) -> list[JobResult]:
            data = await self._client.aget_json(self.POSTINGS_URL.format(ident=ident), params={"mode": "json"})
            return [self._map(j, company_name, ident) for j in as_list(data)]

        return await probe_identifiers(company_name, board)

    def _map(self, job: dict[str, Any], company_name: str, ident: str) -> JobResult:
        return make_job(
            title=job.get("text"),
            default_title=UNTITLED,
            location=first_str(dig(job, "categories", "location"), job.get("workplaceType")),
            source_url=first_str(job.get("hostedUrl"), job.get("applyUrl")),
            fallback_url=f"https://jobs.lever.co/{ident}",
            salary=job.get("salaryDescription"),
            date_posted=job.get("createdAt"),
            job_type=first_str(dig(job, "categories", "commitment"), job.get("workplaceType")),
            description=job.get("descriptionPlain"),
            description_limit=self.settings.description_limit,
            company=company_name,
            ats_source=self.source,
        )
