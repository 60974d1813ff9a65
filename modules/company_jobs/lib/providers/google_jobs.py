from __future__ import annotations

from typing import Any

from ..credentials import APIConfig
from ..models import JobResult
from ..normalize import make_job
from ..utils import dig, first_str
from .base import HttpProviderMixin, ProviderError, as_list
from .registry import register

SERPAPI_URL = "https://serpapi.com/search.json"


@register
class GoogleJobsProvider(HttpProviderMixin):
    """
    Google Jobs results through SerpApi (engine=google_jobs).
    posted_at arrives pre-humanized ("3 days ago") and is passed through.
    """

    name = "google_jobs"
    source = "Google Jobs (SerpApi)"
    credentials = ("serpapi",)

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        data = await self._client.aget_json(
            SERPAPI_URL,
            params={"engine": "google_jobs", "q": f"{company_name} jobs", "api_key": config.get("serpapi")},
        )
        if isinstance(data, dict) and data.get("error"):
            raise ProviderError(str(data["error"]))
        results = as_list(data, "jobs_results")[: self.settings.max_results]
        return [self._map(j, company_name) for j in results]

    def _map(self, job: dict[str, Any], company_name: str) -> JobResult:
        ext = job.get("detected_extensions") or {}
        return make_job(
            title=job.get("title"),
            location=job.get("location"),
            source_url=first_str(dig(job, "related_links", 0, "link"), dig(job, "apply_options", 0, "link"),
                                 job.get("share_link")),
            salary=dig(ext, "salary"),
            date_posted=dig(ext, "posted_at"),
            job_type=dig(ext, "schedule_type"),
            company=job.get("company_name"),
            default_company=company_name,
            ats_source="Google Jobs",
            description=job.get("description"),
            description_limit=self.settings.description_limit,
        )
