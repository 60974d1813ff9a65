from __future__ import annotations

from typing import Any

from ..credentials import APIConfig
from ..models import JobResult
from ..normalize import UNTITLED, make_job
from ..utils import dig, first_str
from .base import HttpProviderMixin, as_list, probe_identifiers
from .registry import register


@register
class AshbyProvider(HttpProviderMixin):
    """
    Ashby posting API (public job boards):
      GET https://api.ashbyhq.com/posting-api/job-board/<ident>?includeCompensation=true
    """

    name = "ashby"
    source = "Ashby"
    BOARD_URL = "https://api.ashbyhq.com/posting-api/job-board/{ident}"

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        async def board(ident: str) -> list[JobResult]:
            data = await self._client.aget_json(
                self.BOARD_URL.format(ident=ident), params={"includeCompensation": "true"}
            )
            return [self._map(j, company_name, ident) for j in as_list(data, "jobs")]

        return await probe_identifiers(company_name, board)

    def _map(self, job: dict[str, Any], company_name: str, ident: str) -> JobResult:
        return make_job(
            title=job.get("title"),
            default_title=UNTITLED,
            location=first_str(job.get("locationName"), job.get("location"),
                               dig(job, "primaryLocation", "locationName")),
            source_url=first_str(job.get("jobUrl"), job.get("applyUrl")),
            fallback_url=f"https://jobs.ashbyhq.com/{ident}",
            salary=first_str(job.get("compensationTierSummary"),
                             dig(job, "compensation", "compensationTierSummary")),
            date_posted=first_str(job.get("publishedDate"), job.get("publishedAt")),
            job_type=job.get("employmentType"),
            company=company_name,
            ats_source=self.source,
        )
