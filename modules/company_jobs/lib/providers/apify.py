"""
Apify actor providers.

An actor run is asynchronous on Apify's side, so each call is a small state
machine:

    POST /acts/<actor>/runs            -> run id + dataset id   (SUBMITTED)
    GET  /actor-runs/<run id>  (poll)  -> READY | RUNNING       (RUNNING)
                                       -> SUCCEEDED             -> GET /datasets/<id>/items
                                       -> FAILED | ABORTED | TIMED-OUT
    local deadline passed              -> timeout diagnostic

Polling sleeps with asyncio.sleep, so cancelling the search stops the loop at
the next poll.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from .. import logging_bridge
from ..credentials import APIConfig
from ..http_client import HttpClient, describe_error
from ..identifiers import domain_stem
from ..models import JobResult
from ..normalize import make_job
from ..utils import dig, first_str
from .base import HttpProviderMixin, ProviderError, as_list
from .registry import register

log = logging.getLogger(__name__)

APIFY_API = "https://api.apify.com/v2"
SUCCEEDED = "SUCCEEDED"
FAILED_STATES = frozenset({"FAILED", "ABORTED", "TIMED-OUT", "TIMED_OUT"})
BATCH_SIZE = 2
MAX_ITEMS = 10


@dataclass(frozen=True)
class Actor:
    actor_id: str
    label: str  # display name used in diagnostics
    ats_source: str
    build_input: Callable[[str], dict[str, Any]]
    default_title: str = "Position Available"


# ---- actor catalogue ----

def _linkedin_search_input(company_name: str) -> dict[str, Any]:
    return {"queries": [f"{company_name} jobs"], "maxResults": MAX_ITEMS, "country": "US"}


LINKEDIN_ACTORS: tuple[Actor, ...] = tuple(
    Actor(actor_id, "LinkedIn Jobs", "LinkedIn", _linkedin_search_input)
    for actor_id in (
        "misceres/linkedin-jobs-search",
        "trudax/linkedin-job-scraper",
        "voyager/linkedin-jobs-scraper",
    )
)

JOB_BOARD_ACTORS: tuple[Actor, ...] = (
    Actor(
        "bebity/linkedin-jobs-scraper", "LinkedIn Jobs", "LinkedIn",
        lambda c: {"queries": [f"{c} jobs"], "maxResults": MAX_ITEMS, "location": "United States"},
    ),
    Actor(
        "curious_coder/indeed-scraper", "Indeed Jobs", "Indeed",
        lambda c: {"queries": [c], "maxItems": MAX_ITEMS, "country": "US"},
        default_title="Job Opening",
    ),
    Actor(
        "codemaverick/naukri-job-scraper-latest", "Naukri Jobs", "Naukri",
        lambda c: {"searchQuery": c, "maxResults": MAX_ITEMS},
    ),
)

# Runs in Apify's Cheerio crawler; returns [{title, location, url, company, source}]
_CHEERIO_PAGE_FUNCTION = """
async function pageFunction(context) {
  const { $, request } = context;
  const jobs = [];
  const selectors = ['.job-listing', '.job-item', '.position', '.opening',
                     '[data-job]', '.career-opportunity', '.job-post'];
  for (const sel of selectors) {
    $(sel).each((i, el) => {
      const title = $(el).find('h1, h2, h3, .title, .job-title').first().text().trim();
      const location = $(el).find('.location, .job-location').first().text().trim();
      const link = $(el).find('a').first().attr('href');
      if (title) {
        jobs.push({ title, location, url: link ? new URL(link, request.url).href : request.url,
                    source: 'Company Career Page' });
      }
    });
    if (jobs.length > 0) break;
  }
  return jobs;
}
"""

# Runs in Apify's browser crawler for JS-rendered career pages
_BROWSER_PAGE_FUNCTION = """
async function pageFunction(context) {
  const { page } = context;
  await page.waitForTimeout(2000);
  return await page.evaluate(() => Array.from(document.querySelectorAll(
      '.job-listing, .job-item, .position, .opening, [data-job], .career-opportunity'))
    .map(el => ({
      title: el.querySelector('h1, h2, h3, .title, .job-title')?.textContent?.trim(),
      location: el.querySelector('.location, .job-location')?.textContent?.trim(),
      url: el.querySelector('a')?.href || window.location.href,
      source: 'Company Career Page (JS)'
    }))
    .filter(job => job.title));
}
"""


def _cheerio_input(company_name: str) -> dict[str, Any]:
    d = domain_stem(company_name)
    urls = [f"https://careers.{d}.com", f"https://jobs.{d}.com", f"https://{d}.com/careers", f"https://{d}.com/jobs"]
    return {"startUrls": [{"url": u} for u in urls], "pageFunction": _CHEERIO_PAGE_FUNCTION}


def _browser_input(company_name: str) -> dict[str, Any]:
    d = domain_stem(company_name)
    urls = [f"https://careers.{d}.com", f"https://{d}.com/careers"]
    return {"startUrls": [{"url": u} for u in urls], "pageFunction": _BROWSER_PAGE_FUNCTION}


CAREER_PAGE_ACTORS: tuple[Actor, ...] = (
    Actor("apify/cheerio-scraper", "Cheerio Scraper", "Career Page", _cheerio_input,
          default_title="Career Opportunity"),
    Actor("apify/web-scraper", "Web Scraper", "Career Page (JS)", _browser_input,
          default_title="Career Opportunity"),
)


# ---- run state machine ----

class ActorRunner:
    """Start one actor run, poll it to a terminal state, return its dataset items."""

    def __init__(
        self,
        client: HttpClient,
        token: str,
        *,
        poll_interval: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._token = token
        self.poll_interval = poll_interval
        self._clock = clock

    async def run(self, actor: Actor, company_name: str, timeout: float) -> list[dict[str, Any]]:
        params = {"token": self._token}
        started = await self._client.apost_json(
            f"{APIFY_API}/acts/{actor.actor_id.replace('/', '~')}/runs",
            payload=actor.build_input(company_name),
            params=params,
        )
        run_id = dig(started, "data", "id")
        dataset_id = dig(started, "data", "defaultDatasetId")
        if not run_id or not dataset_id:
            raise ProviderError(f"{actor.actor_id}: run did not start")
        log.debug("actor %s run %s submitted", actor.actor_id, run_id)

        deadline = self._clock() + timeout
        while True:
            status_data = await self._client.aget_json(f"{APIFY_API}/actor-runs/{run_id}", params=params)
            status = str(dig(status_data, "data", "status") or "").upper()
            if status == SUCCEEDED:
                items = await self._client.aget_json(f"{APIFY_API}/datasets/{dataset_id}/items", params=params)
                return as_list(items, "items")
            if status in FAILED_STATES:
                message = first_str(dig(status_data, "data", "statusMessage"))
                raise ProviderError(f"{actor.actor_id}: run {status}" + (f" ({message})" if message else ""))
            if self._clock() + self.poll_interval > deadline:
                raise ProviderError(f"{actor.actor_id}: run still {status or 'pending'} after {timeout:g}s")
            await asyncio.sleep(self.poll_interval)


def map_actor_item(item: dict[str, Any], actor: Actor, company_name: str, description_limit: int) -> JobResult:
    return make_job(
        title=first_str(item.get("title"), item.get("jobTitle"), item.get("name")),
        default_title=actor.default_title,
        location=item.get("location"),
        source_url=first_str(item.get("url"), item.get("link"), item.get("jobUrl")),
        salary=first_str(item.get("salary"), item.get("salaryText")),
        date_posted=first_str(item.get("postedTime"), item.get("postedDate"), item.get("datePosted")),
        job_type=first_str(item.get("workplace"), item.get("employmentType"), item.get("jobType")),
        company=first_str(item.get("company"), item.get("companyName")),
        default_company=company_name,
        ats_source=first_str(item.get("source")) or actor.ats_source,
        description=item.get("description"),
        description_limit=description_limit,
        skills=item.get("skills") or item.get("requiredSkills") or item.get("tags"),
    )


# ---- providers ----

class _ApifyProvider(HttpProviderMixin):
    credentials = ("apify",)

    def _runner(self, config: APIConfig) -> ActorRunner:
        return ActorRunner(self._client, config.get("apify") or "", poll_interval=self.settings.apify_poll_interval)

    def _map_items(self, items: Sequence[dict[str, Any]], actor: Actor, company_name: str) -> list[JobResult]:
        return [
            map_actor_item(i, actor, company_name, self.settings.description_limit)
            for i in items[:MAX_ITEMS]
        ]

    async def _run_bundle(
        self,
        actors: Sequence[Actor],
        company_name: str,
        config: APIConfig,
        timeout: float,
    ) -> list[JobResult]:
        """
        Run actors two at a time. Per-actor failures are collected; the bundle
        fails only when every actor failed.
        """
        runner = self._runner(config)
        jobs: list[JobResult] = []
        reasons: list[str] = []
        for i in range(0, len(actors), BATCH_SIZE):
            batch = actors[i:i + BATCH_SIZE]
            settled = await asyncio.gather(
                *(runner.run(a, company_name, timeout) for a in batch), return_exceptions=True
            )
            for actor, res in zip(batch, settled):
                if isinstance(res, asyncio.CancelledError):
                    raise res
                if isinstance(res, BaseException):
                    reason = res.args[0] if isinstance(res, ProviderError) else f"{actor.label}: {describe_error(res)}"
                    reasons.append(reason)
                    logging_bridge.error({
                        "component": "company_jobs.providers",
                        "op": "actor_failed",
                        "source": self.source,
                        "actor": actor.actor_id,
                        "reason": reason,
                    })
                    continue
                jobs.extend(self._map_items(res, actor, company_name))
        if reasons and len(reasons) == len(actors):
            raise ProviderError("; ".join(reasons))
        return jobs


@register
class LinkedInProvider(_ApifyProvider):
    """LinkedIn search actors, tried one after another until one yields titled items."""

    name = "linkedin"
    source = "LinkedIn Jobs (Apify)"

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        runner = self._runner(config)
        reasons: list[str] = []
        for actor in LINKEDIN_ACTORS:
            try:
                items = await runner.run(actor, company_name, self.settings.linkedin_timeout)
            except ProviderError as e:
                reasons.append(str(e))
                continue
            except Exception as e:
                reasons.append(f"{actor.actor_id}: {describe_error(e)}")
                continue
            jobs = self._map_items([i for i in items if first_str(i.get("title"))], actor, company_name)
            if jobs:
                return jobs
            reasons.append(f"{actor.actor_id}: no results")
        raise ProviderError("; ".join(reasons))


@register
class ApifyQuickProvider(_ApifyProvider):
    """Job-board actors (LinkedIn, Indeed, Naukri)."""

    name = "apify_quick"
    source = "Apify Job Boards"

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        return await self._run_bundle(JOB_BOARD_ACTORS, company_name, config, self.settings.apify_quick_timeout)


@register
class ApifyDeepProvider(_ApifyProvider):
    """Job-board actors plus generic career-page crawlers; slow, exhaustive mode only."""

    name = "apify_deep"
    source = "Apify Deep Search"

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        actors = JOB_BOARD_ACTORS + CAREER_PAGE_ACTORS
        return await self._run_bundle(actors, company_name, config, self.settings.apify_deep_timeout)
