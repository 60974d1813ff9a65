from __future__ import annotations

from typing import Any

from ..credentials import APIConfig
from ..models import JobResult
from ..normalize import UNTITLED, extract_salary, make_job
from ..utils import dig, first_str
from .base import HttpProviderMixin, as_list, probe_identifiers
from .registry import register


@register
class GreenhouseProvider(HttpProviderMixin):
    """
    Public Greenhouse job board API, probed by identifier:
      GET https://api.greenhouse.io/v1/boards/<ident>/jobs?content=true -> {"jobs": [...]}
    Salary is scraped out of the HTML `content` since the API has no salary field.
    """

    name = "greenhouse"
    source = "Greenhouse"
    BOARD_URL = "https://api.greenhouse.io/v1/boards/{ident}/jobs"

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        async def board(ident: str) -> list[JobResult]:
            data = await self._client.aget_json(self.BOARD_URL.format(ident=ident), params={"content": "true"})
            return [self._map(j, company_name, ident) for j in as_list(data, "jobs")]

        return await probe_identifiers(company_name, board)

    def _map(self, job: dict[str, Any], company_name: str, ident: str) -> JobResult:
        return make_job(
            title=job.get("title"),
            default_title=UNTITLED,
            location=first_str(dig(job, "location", "name"), dig(job, "offices", 0, "name")),
            source_url=job.get("absolute_url"),
            fallback_url=f"https://boards.greenhouse.io/{ident}",
            salary=extract_salary(job.get("content")),
            date_posted=job.get("updated_at"),
            job_type=dig(job, "metadata", "employment_type"),
            company=company_name,
            ats_source=self.source,
        )
