# company_jobs/http_client.py
from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

LOG = logging.getLogger(__name__)


class HttpClient:
    """
    Shared HTTP client with sane defaults and simple helpers.

    Blocking calls run on requests.Session; the a* coroutines push them onto a
    worker thread so providers can await them from the event loop. Retries are
    off by default: a failed provider call is reported, not retried.
    """

    def __init__(
        self,
        timeout: float = 15.0,
        user_agent: str = "CompanyJobs/0.1 (+https://example.invalid)",
        retries: int = 0,
    ):
        self.timeout = float(timeout)
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent, "Accept": "application/json, */*;q=0.8"})

        retry = Retry(
            total=retries,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset(["GET", "POST", "HEAD"]),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=20)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    # ---- blocking ----
    def get_text(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        encoding: str | None = None,
        **kwargs: Any,
    ) -> str:
        """GET and return decoded text with gentle encoding hints."""
        resp = self.session.get(url, params=params, headers=headers, timeout=timeout or self.timeout, **kwargs)
        resp.raise_for_status()
        if encoding:
            resp.encoding = encoding
        elif not resp.encoding and resp.apparent_encoding:
            resp.encoding = resp.apparent_encoding
        return resp.text

    def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> Any:
        """GET and parse JSON with clearer errors if decoding fails."""
        resp = self.session.get(url, params=params, headers=headers, timeout=timeout or self.timeout, **kwargs)
        resp.raise_for_status()
        return _decode_json(resp)

    def post_json(
        self,
        url: str,
        *,
        payload: Any = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> Any:
        """POST a JSON body and parse the JSON response."""
        resp = self.session.post(
            url, json=payload, params=params, headers=headers, timeout=timeout or self.timeout, **kwargs
        )
        resp.raise_for_status()
        return _decode_json(resp)

    # ---- async ----
    async def aget_text(self, url: str, **kwargs: Any) -> str:
        return await asyncio.to_thread(self.get_text, url, **kwargs)

    async def aget_json(self, url: str, **kwargs: Any) -> Any:
        return await asyncio.to_thread(self.get_json, url, **kwargs)

    async def apost_json(self, url: str, **kwargs: Any) -> Any:
        return await asyncio.to_thread(self.post_json, url, **kwargs)

    def close(self) -> None:
        try:
            self.session.close()
        except Exception:
            LOG.debug("HttpClient.close() swallow", exc_info=True)


def _decode_json(resp: requests.Response) -> Any:
    # Prefer requests' decoder; fall back to manual if Content-Type is misleading.
    try:
        return resp.json()
    except ValueError as e:
        try:
            return json.loads(resp.text)
        except ValueError:
            preview = resp.text[:200].replace("\n", " ")
            raise ValueError(f"JSON decode failed; body starts: {preview!r}") from e


def describe_error(exc: BaseException) -> str:
    """
    Short, secret-free reason for a failed call. requests' own messages embed
    the full URL, and several providers take their API key as a query param.
    """
    if isinstance(exc, requests.HTTPError):
        resp = exc.response
        if resp is not None:
            reason = f" {resp.reason}" if resp.reason else ""
            return f"HTTP {resp.status_code}{reason}"
        return "HTTP error"
    if isinstance(exc, requests.Timeout):
        return "request timed out"
    if isinstance(exc, requests.ConnectionError):
        return "connection failed"
    if isinstance(exc, requests.RequestException):
        return type(exc).__name__
    if isinstance(exc, asyncio.TimeoutError):
        return "timed out"
    return str(exc) or type(exc).__name__
