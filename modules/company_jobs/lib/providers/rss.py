from __future__ import annotations

import html
import logging
import re

import requests
from bs4 import BeautifulSoup, NavigableString, Tag

from ..credentials import APIConfig
from ..http_client import describe_error
from ..identifiers import rss_feed_urls
from ..models import JobResult
from ..normalize import make_job, strip_markup
from .base import HttpProviderMixin, ProviderError
from .registry import register
from .text import extract_location, is_job_related

log = logging.getLogger(__name__)

MAX_FEEDS = 3
MAX_ITEMS = 10
DEFAULT_LOCATION = "Remote/Multiple locations"

_CDATA_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.S)


@register
class RssProvider(HttpProviderMixin):
    """
    Career/job RSS feeds at guessed URLs (see identifiers.rss_feed_urls).

    Feeds are tried in order and the first one yielding job-like items wins.
    A feed that answers but carries nothing job-related is not an error; the
    provider only fails when none of the feeds could be fetched.
    """

    name = "rss"
    source = "RSS Feeds"

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        reasons: list[str] = []
        reached = False
        for url in rss_feed_urls(company_name)[:MAX_FEEDS]:
            try:
                text = await self._client.aget_text(url)
            except requests.RequestException as e:
                reasons.append(describe_error(e))
                log.debug("feed %s failed: %s", url, reasons[-1])
                continue
            reached = True
            jobs = parse_feed(text, company_name, ats_source="RSS Feed",
                              description_limit=self.settings.description_limit)
            if jobs:
                return jobs
        if not reached:
            raise ProviderError(f"no feed reachable ({'; '.join(reasons)})")
        return []


def parse_feed(
    xml_text: str,
    company_name: str,
    *,
    ats_source: str = "RSS Feed",
    description_limit: int = 200,
    max_items: int = MAX_ITEMS,
) -> list[JobResult]:
    """Job-like <item>s of an RSS document, first `max_items` items only."""
    # Unwrap CDATA into escaped text first; HTML parsers disagree on CDATA outside foreign content.
    xml_text = _CDATA_RE.sub(lambda m: html.escape(m.group(1)), xml_text or "")
    soup = BeautifulSoup(xml_text, "html.parser")
    out: list[JobResult] = []
    for item in soup.find_all("item")[:max_items]:
        title = _text(item, "title")
        if not title or not is_job_related(title):
            continue
        description = strip_markup(_text(item, "description"))
        out.append(
            make_job(
                title=title,
                location=extract_location(description) or DEFAULT_LOCATION,
                source_url=_link(item),
                date_posted=_text(item, "pubdate"),
                description=description,
                description_limit=description_limit,
                company=company_name,
                ats_source=ats_source,
            )
        )
    return out


def _text(item: Tag, name: str) -> str | None:
    el = item.find(name)
    if el is None:
        return None
    return el.get_text(strip=True) or None


def _link(item: Tag) -> str | None:
    # html.parser treats <link> as a void element, so the URL usually lands in
    # the text node right after it.
    el = item.find("link")
    if el is None:
        return None
    txt = el.get_text(strip=True)
    if txt:
        return txt
    sib = el.next_sibling
    if isinstance(sib, NavigableString):
        return str(sib).strip() or None
    return None
