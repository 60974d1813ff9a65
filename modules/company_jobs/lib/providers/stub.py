from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

from ..config import Settings
from ..credentials import APIConfig
from ..http_client import HttpClient
from ..models import JobResult, ProviderResult
from ..normalize import make_job
from .registry import register


@register
class StubProvider:
    """
    A zero-network provider used for tests and dry-runs.

    Options:
      - items: JobResults or dicts ({title, location, url, ...}) to return
      - error: str               # report a failure with this reason instead
      - raises: BaseException    # misbehave by raising out of fetch()
      - delay: float             # simulated latency in seconds
      - credentials: names that must be present, else the stub reports skipped

    `calls` counts fetch() invocations so tests can assert which stages ran.
    """

    name = "stub"
    source = "Stub"
    credentials: tuple[str, ...] = ()

    def __init__(
        self,
        settings: Settings | None = None,
        client: HttpClient | None = None,
        *,
        name: str | None = None,
        source: str | None = None,
        items: Iterable[JobResult | dict[str, Any]] = (),
        error: str | None = None,
        raises: BaseException | None = None,
        delay: float = 0.0,
        credentials: tuple[str, ...] = (),
    ) -> None:
        self.settings = settings or Settings()
        if name:
            self.name = name
        if source:
            self.source = source
        self.credentials = tuple(credentials)
        self.items = [self._coerce(i) for i in items]
        self.error = error
        self.raises = raises
        self.delay = delay
        self.calls = 0
        self.companies: list[str] = []

    def _coerce(self, item: JobResult | dict[str, Any]) -> JobResult:
        if isinstance(item, JobResult):
            return item
        return make_job(
            title=item.get("title"),
            location=item.get("location"),
            source_url=item.get("url") or item.get("source_url"),
            count=item.get("count"),
            company=item.get("company"),
            default_company="Stub Co",
            ats_source=item.get("ats_source") or self.source,
            date_posted=item.get("date_posted"),
        )

    async def fetch(self, company_name: str, config: APIConfig) -> ProviderResult:
        self.calls += 1
        self.companies.append(company_name)
        if self.credentials and not config.has(*self.credentials):
            return ProviderResult.skip(self.source)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raises is not None:
            raise self.raises
        if self.error:
            return ProviderResult.failed(self.source, f"{self.source}: {self.error}")
        return ProviderResult.ok(self.source, self.items)
