from __future__ import annotations

from typing import Any

from ..credentials import APIConfig
from ..models import JobResult
from ..normalize import UNTITLED, make_job
from ..utils import dig, first_str
from .base import HttpProviderMixin, as_list, probe_identifiers
from .registry import register


@register
class WorkableProvider(HttpProviderMixin):
    name = "workable"
    source = "Workable"
    JOBS_URL = "https://{ident}.workable.com/spi/v3/jobs"

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        async def board(ident: str) -> list[JobResult]:
            data = await self._client.aget_json(self.JOBS_URL.format(ident=ident))
            return [self._map(j, company_name, ident) for j in as_list(data, "jobs")]

        return await probe_identifiers(company_name, board)

    def _map(self, job: dict[str, Any], company_name: str, ident: str) -> JobResult:
        return make_job(
            title=job.get("title"),
            default_title=UNTITLED,
            location=first_str(dig(job, "location", "city"), dig(job, "location", "country")),
            source_url=job.get("url"),
            fallback_url=f"https://{ident}.workable.com",
            salary=job.get("salary"),
            date_posted=job.get("published_on"),
            job_type=job.get("type"),
            company=company_name,
            ats_source=self.source,
        )
