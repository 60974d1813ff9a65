from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..credentials import APIConfig
from ..dates import humanize_date
from ..http_client import describe_error
from ..models import JobResult
from ..normalize import make_job, strip_markup
from ..utils import first_str
from .base import HttpProviderMixin, ProviderError, as_list
from .registry import register
from .text import mentions_company

log = logging.getLogger(__name__)

ARBEITNOW_URL = "https://www.arbeitnow.com/api/job-board-api"
JOBICY_URL = "https://jobicy.com/api/v2/remote-jobs"
ARBEITNOW_LIMIT = 5
JOBICY_LIMIT = 3


@register
class FreeApisProvider(HttpProviderMixin):
    """
    Keyless job boards: Arbeitnow (EU + remote) and Jobicy (remote).

    Both return loosely matching results for a search term, so each item is
    kept only when it is plausibly about this company. Items whose posting
    date is present but unusable (unparseable or too old) are dropped.
    One board failing is logged; the provider fails only if both do.
    """

    name = "free_apis"
    source = "Free Job APIs"

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        boards = (("Arbeitnow", self._arbeitnow), ("Jobicy", self._jobicy))
        settled = await asyncio.gather(*(fn(company_name) for _, fn in boards), return_exceptions=True)

        jobs: list[JobResult] = []
        reasons: list[str] = []
        for (label, _), res in zip(boards, settled):
            if isinstance(res, BaseException):
                if isinstance(res, asyncio.CancelledError):
                    raise res
                reasons.append(f"{label} {describe_error(res)}")
                log.debug("%s failed: %s", label, reasons[-1])
                continue
            jobs.extend(res)
        if len(reasons) == len(boards):
            raise ProviderError("; ".join(reasons))
        return jobs

    # ---- Arbeitnow ----
    async def _arbeitnow(self, company_name: str) -> list[JobResult]:
        data = await self._client.aget_json(ARBEITNOW_URL, params={"search": company_name})
        relevant = [j for j in as_list(data, "data") if _arbeitnow_relevant(j, company_name)]

        out: list[JobResult] = []
        for job in relevant[:ARBEITNOW_LIMIT]:
            created = job.get("created_at")
            posted = humanize_date(created) if created else None
            if created and not posted:
                continue
            job_types = job.get("job_types")
            out.append(
                make_job(
                    title=job.get("title"),
                    default_title="Job Opening",
                    location=first_str(job.get("location"), "Remote"),
                    source_url=first_str(job.get("url"), job.get("company_url")),
                    salary=job.get("salary"),
                    job_type=job_types[0] if isinstance(job_types, list) and job_types else None,
                    company=job.get("company_name"),
                    default_company=company_name,
                    ats_source="Arbeitnow",
                    description=strip_markup(job.get("description")),
                    description_limit=self.settings.description_limit,
                    date_posted=posted,
                    humanize=False,
                )
            )
        return out

    # ---- Jobicy ----
    async def _jobicy(self, company_name: str) -> list[JobResult]:
        data = await self._client.aget_json(JOBICY_URL, params={"count": "10", "tag": company_name})
        relevant = [
            j for j in as_list(data, "jobs")
            if mentions_company(company_name, j.get("companyName"))
            or company_name.lower() in str(j.get("jobTitle") or "").lower()
        ]

        out: list[JobResult] = []
        for job in relevant[:JOBICY_LIMIT]:
            pub = job.get("pubDate")
            posted = humanize_date(pub) if pub else None
            if pub and not posted:
                continue
            lo, hi = job.get("annualSalaryMin"), job.get("annualSalaryMax")
            out.append(
                make_job(
                    title=job.get("jobTitle"),
                    default_title="Remote Position",
                    location="Remote",
                    source_url=job.get("url"),
                    salary=f"${lo} - ${hi}" if lo and hi else (f"${lo}+" if lo else None),
                    job_type=_first(job.get("jobType")),
                    company=job.get("companyName"),
                    default_company=company_name,
                    ats_source="Jobicy",
                    description=strip_markup(job.get("jobExcerpt")),
                    description_limit=self.settings.description_limit,
                    date_posted=posted,
                    humanize=False,
                )
            )
        return out


def _arbeitnow_relevant(job: dict[str, Any], company_name: str) -> bool:
    c = company_name.lower().strip()
    if mentions_company(company_name, job.get("company_name")):
        return True
    if c in str(job.get("title") or "").lower():
        return True
    # Company named anywhere in the posting body or tags
    tags = job.get("tags") if isinstance(job.get("tags"), list) else []
    haystack = " ".join([str(job.get("description") or ""), " ".join(str(t) for t in tags)]).lower()
    return c in haystack


def _first(v: Any) -> Any:
    # Jobicy sends jobType as a list in v2
    if isinstance(v, list):
        return v[0] if v else None
    return v
