from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, ClassVar, Protocol, runtime_checkable

import requests

from .. import logging_bridge
from ..config import Settings
from ..credentials import APIConfig
from ..http_client import HttpClient, describe_error
from ..identifiers import generate_identifiers
from ..models import JobResult, ProviderResult

log = logging.getLogger(__name__)


class ProviderError(Exception):
    """Raised inside an adapter; always converted to a ProviderResult at its boundary."""


@runtime_checkable
class Provider(Protocol):
    """
    Capability every job source exposes to the orchestrator.

    Contract:
      - fetch() never raises: failures come back as ProviderResult(success=False,
        error="<source>: <reason>").
      - A provider whose credential is missing returns ProviderResult.skip()
        without touching the network.
      - No shared mutable state between concurrent fetch() calls.
    """

    name: str  # registry key, e.g. "greenhouse"
    source: str  # display label, e.g. "Greenhouse"
    credentials: tuple[str, ...]  # credential names required; () for free sources

    async def fetch(self, company_name: str, config: APIConfig) -> ProviderResult: ...


class HttpProviderMixin:
    """
    Construction + boundary plumbing shared by the HTTP adapters.

    Concrete adapters set name/source/credentials and implement
    `_search(company_name, config) -> list[JobResult]`.
    """

    name: ClassVar[str] = ""
    source: ClassVar[str] = ""
    credentials: ClassVar[tuple[str, ...]] = ()

    def __init__(self, settings: Settings | None = None, client: HttpClient | None = None) -> None:
        self.settings = settings or Settings()
        self._client = client or HttpClient(timeout=self.settings.http_timeout, user_agent=self.settings.user_agent)

    async def fetch(self, company_name: str, config: APIConfig) -> ProviderResult:
        if self.credentials and not config.has(*self.credentials):
            return ProviderResult.skip(self.source)
        return await guarded(self.source, lambda: self._search(company_name, config))

    async def _search(self, company_name: str, config: APIConfig) -> list[JobResult]:
        raise NotImplementedError

    def close(self) -> None:
        self._client.close()


async def guarded(source: str, call: Callable[[], Awaitable[Sequence[JobResult]]]) -> ProviderResult:
    """Run an adapter body and convert any failure into a ProviderResult."""
    try:
        jobs = await call()
    except Exception as e:
        return failure(source, e)
    return ProviderResult.ok(source, list(jobs))


def failure(source: str, exc: BaseException | str, **context: Any) -> ProviderResult:
    reason = exc if isinstance(exc, str) else describe_error(exc)
    log.debug("%s failed: %s", source, reason, exc_info=not isinstance(exc, (str, ProviderError)))
    logging_bridge.error({
        "component": "company_jobs.providers",
        "op": "provider_error",
        "source": source,
        "reason": reason,
        **context,
    })
    return ProviderResult.failed(source, f"{source}: {reason}")


def as_list(data: Any, *keys: str) -> list[dict[str, Any]]:
    """
    Pull the list of job dicts out of a payload that is either a bare list or
    an object holding the list under one of `keys`.
    """
    if isinstance(data, dict):
        for k in keys:
            v = data.get(k)
            if isinstance(v, list):
                data = v
                break
        else:
            return []
    if not isinstance(data, list):
        return []
    return [x for x in data if isinstance(x, dict)]


async def probe_identifiers(
    company_name: str,
    fetch_board: Callable[[str], Awaitable[list[JobResult]]],
) -> list[JobResult]:
    """
    Try each generated identifier in order; the first board that answers 2xx
    with at least one posting wins. Empty boards and HTTP failures move on to
    the next candidate. Raises ProviderError when nothing matched.
    """
    idents = generate_identifiers(company_name)
    last_reason = "no postings"
    for ident in idents:
        try:
            jobs = await fetch_board(ident)
        except (requests.RequestException, ValueError) as e:
            last_reason = describe_error(e)
            log.debug("board probe %r failed: %s", ident, last_reason)
            continue
        if jobs:
            log.debug("board probe %r matched (%d postings)", ident, len(jobs))
            return jobs
    raise ProviderError(f"no board found after {len(idents)} identifiers (last: {last_reason})")
