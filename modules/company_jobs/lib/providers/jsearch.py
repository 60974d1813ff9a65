from __future__ import annotations

from typing import Any

from ..credentials import APIConfig
from ..models import JobResult
from ..normalize import make_job
from ..utils import first_str
from .base import HttpProviderMixin, ProviderError, as_list
from .registry import register

JSEARCH_HOST = "jsearch.p.rapidapi.com"
DESCRIPTION_LIMIT = 300


@register
class JSearchProvider(HttpProviderMixin):
    """
    JSearch (RapidAPI), a Google-for-Jobs aggregator. Primary source: one call,
    richest records (salary bands, skills, apply links).

      GET https://jsearch.p.rapidapi.com/search?query="<company> jobs"&page=1&num_pages=1
      -> {"status": "OK", "data": [...]}  |  {"status": "ERROR", "error": {"message": ...}}
    """

    name = "jsearch"
    source = "JSearch (Google Jobs)"
    credentials = ("jsearch",)
    SEARCH_URL = f"https://{JSEARCH_HOST}/search"

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        data = await self._client.aget_json(
            self.SEARCH_URL,
            params={
                "query": f"{company_name} jobs",
                "page": "1",
                "num_pages": "1",
                "date_posted": "all",
                "remote_jobs_only": "false",
                "employment_types": "FULLTIME,PARTTIME,CONTRACTOR,INTERN",
                "country": "us",
            },
            headers={"X-RapidAPI-Key": config.get("jsearch") or "", "X-RapidAPI-Host": JSEARCH_HOST},
        )
        if isinstance(data, dict) and str(data.get("status") or "").upper() == "ERROR":
            err = data.get("error")
            msg = err.get("message") if isinstance(err, dict) else None
            raise ProviderError(msg or "API returned error status")
        return [self._map(j, company_name) for j in as_list(data, "data")]

    def _map(self, job: dict[str, Any], company_name: str) -> JobResult:
        city, state = first_str(job.get("job_city")), first_str(job.get("job_state"))
        location = f"{city}, {state}" if city and state else job.get("job_country")

        return make_job(
            title=job.get("job_title"),
            location=location,
            source_url=first_str(job.get("job_apply_link"), job.get("job_url"), job.get("job_google_link")),
            salary=_salary(job),
            date_posted=first_str(job.get("job_posted_at_datetime_utc"), job.get("job_posted_at_timestamp")),
            job_type=job.get("job_employment_type"),
            company=job.get("employer_name"),
            default_company=company_name,
            ats_source=self.source,
            description=job.get("job_description"),
            description_limit=DESCRIPTION_LIMIT,
            description_ellipsis=True,
            skills=job.get("job_required_skills"),
        )


def _salary(job: dict[str, Any]) -> str | None:
    cur = first_str(job.get("job_salary_currency"))
    lo, hi = job.get("job_min_salary"), job.get("job_max_salary")
    if cur and lo and hi:
        return f"{cur}{_num(lo)} - {cur}{_num(hi)}"
    period = first_str(job.get("job_salary_period"))
    if period:
        return f"Salary info available ({period})"
    return None


def _num(v: Any) -> str:
    # 120000.0 -> "120000"
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)
