from __future__ import annotations

from typing import Any

from ..credentials import APIConfig
from ..models import JobResult
from ..normalize import UNTITLED, make_job, strip_markup
from ..utils import first_str
from .base import HttpProviderMixin, as_list, probe_identifiers
from .registry import register


@register
class RecruiteeProvider(HttpProviderMixin):
    name = "recruitee"
    source = "Recruitee"
    OFFERS_URL = "https://{ident}.recruitee.com/api/offers"

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        async def board(ident: str) -> list[JobResult]:
            data = await self._client.aget_json(self.OFFERS_URL.format(ident=ident))
            return [self._map(j, company_name, ident) for j in as_list(data, "offers")]

        return await probe_identifiers(company_name, board)

    def _map(self, job: dict[str, Any], company_name: str, ident: str) -> JobResult:
        city_country = ", ".join(x for x in (first_str(job.get("city")), first_str(job.get("country"))) if x)
        return make_job(
            title=job.get("title"),
            default_title=UNTITLED,
            location=first_str(job.get("location"), city_country, "Remote" if job.get("remote") else None),
            source_url=first_str(job.get("careers_url"), job.get("careers_apply_url")),
            fallback_url=f"https://{ident}.recruitee.com",
            date_posted=first_str(job.get("published_at"), job.get("created_at")),
            job_type=job.get("employment_type_code"),
            description=strip_markup(job.get("description")),
            description_limit=self.settings.description_limit,
            company=company_name,
            ats_source=self.source,
        )
