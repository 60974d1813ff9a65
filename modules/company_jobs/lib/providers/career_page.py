from __future__ import annotations

from ..companies import known_career_page
from ..config import Settings
from ..credentials import APIConfig
from ..http_client import HttpClient
from ..identifiers import domain_stem
from ..models import JobResult, ProviderResult
from ..normalize import make_job
from .registry import register


@register
class CareerPageSuggestionProvider:
    """
    No-network fallback: points at the company's career page.

    The posting it returns is generic by construction ("Various Open Positions",
    "Check Career Page"), so the final merge never counts it as a job. The
    engine surfaces it as a suggestion when a search finds nothing concrete.
    """

    name = "career_page_suggestion"
    source = "Career Page"
    credentials: tuple[str, ...] = ()

    def __init__(self, settings: Settings | None = None, client: HttpClient | None = None) -> None:
        self.settings = settings or Settings()

    async def fetch(self, company_name: str, config: APIConfig) -> ProviderResult:
        job = suggestion_for(company_name)
        return ProviderResult.ok(job.ats_source, [job])


def suggestion_for(company_name: str) -> JobResult:
    known = known_career_page(company_name)
    if known:
        url, display_name = known
        return make_job(
            title="Various Open Positions",
            count="Multiple",
            location="Multiple Locations & Remote",
            source_url=url,
            date_posted="Updated regularly",
            job_type="Various (Full-time, Part-time, Contract)",
            company=display_name,
            ats_source="Career Page",
            humanize=False,
        )
    return make_job(
        title="Check Career Page",
        count="Unknown",
        location="Visit career page for details",
        source_url=f"https://careers.{domain_stem(company_name)}.com",
        date_posted="Check career page",
        job_type="Visit career page",
        company=company_name,
        ats_source="Career Page Suggestion",
        humanize=False,
    )
