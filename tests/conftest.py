# tests/conftest.py
import os
import tempfile
from collections.abc import Callable
from typing import Any

import pytest
import requests
from freezegun import freeze_time

from modules.company_jobs.lib.config import Settings
from modules.company_jobs.lib.credentials import ENV_VARS, MemoryCredentialStore
from modules.company_jobs.lib.engine import FREE_BUNDLE
from modules.company_jobs.lib.models import JobResult
from modules.company_jobs.lib.normalize import make_job
from modules.company_jobs.lib.providers.career_page import CareerPageSuggestionProvider
from modules.company_jobs.lib.providers.stub import StubProvider


# ---------------------------------------------------------------------
# Live tests are opt-in: use --live or RUN_LIVE_TESTS=1
# ---------------------------------------------------------------------
def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run tests marked as 'live' (network calls or external services).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "live: marks tests that perform live network calls or hit external services (skipped by default).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    run_live = config.getoption("--live") or os.getenv("RUN_LIVE_TESTS") == "1"
    if run_live:
        return
    skip_live = pytest.mark.skip(reason="live tests disabled (use --live or RUN_LIVE_TESTS=1)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ---------------------------------------------------------------------
# Test-wide env defaults (autouse, function-scoped)
# ---------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _env_defaults(monkeypatch, request):
    # Write logs to a throwaway dir so real logs stay clean (per test)
    tmp_logs = tempfile.mkdtemp(prefix="cj-pytest-logs-")
    monkeypatch.setenv("LOG_DIR", tmp_logs)
    monkeypatch.setenv("ACTIVITY_LOG_PREFIX", "activity-test")
    monkeypatch.setenv("ERROR_LOG_PREFIX", "error-test")

    # Unit tests never see real keys or settings files
    if "live" not in request.keywords:
        for var in ENV_VARS.values():
            monkeypatch.delenv(var, raising=False)
    for var in [v for v in os.environ if v.startswith("COMPANY_JOBS_")]:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def frozen_utc():
    with freeze_time("2025-01-01T00:00:00Z"):
        yield


# ---------------------------------------------------------------------
# Fake HTTP client
# ---------------------------------------------------------------------
def http_error(status: int, reason: str = "") -> requests.HTTPError:
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason or {404: "Not Found", 500: "Internal Server Error", 401: "Unauthorized"}.get(status, "")
    return requests.HTTPError(f"{status} Client Error for url: https://example.invalid?token=SECRET", response=resp)


class FakeHttpClient:
    """
    Stand-in for HttpClient. Routes are matched by URL prefix, longest first.
    A route value may be:
      - a payload (dict/list/str) returned as-is
      - an exception instance, raised
      - a list, consumed one element per call (last element repeats)
      - a callable(url, kwargs) returning any of the above
    Unrouted URLs raise HTTP 404. Every call is recorded in `calls`.
    """

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def route(self, prefix: str, value: Any) -> "FakeHttpClient":
        self.routes[prefix] = value
        return self

    def _resolve(self, method: str, url: str, kwargs: dict[str, Any]) -> Any:
        self.calls.append((method, url, kwargs))
        for prefix in sorted(self.routes, key=len, reverse=True):
            if url.startswith(prefix):
                value = self.routes[prefix]
                if isinstance(value, list):
                    value = value.pop(0) if len(value) > 1 else value[0]
                if callable(value) and not isinstance(value, type):
                    value = value(url, kwargs)
                if isinstance(value, BaseException):
                    raise value
                return value
        raise http_error(404)

    def urls(self) -> list[str]:
        return [u for _, u, _ in self.calls]

    async def aget_json(self, url: str, **kwargs: Any) -> Any:
        return self._resolve("GET", url, kwargs)

    async def aget_text(self, url: str, **kwargs: Any) -> str:
        return self._resolve("GET", url, kwargs)

    async def apost_json(self, url: str, **kwargs: Any) -> Any:
        return self._resolve("POST", url, kwargs)

    def close(self) -> None:
        pass


@pytest.fixture
def fake_http() -> FakeHttpClient:
    return FakeHttpClient()


@pytest.fixture
def settings() -> Settings:
    return Settings.from_env_and_kwargs({})


@pytest.fixture
def creds() -> MemoryCredentialStore:
    return MemoryCredentialStore()


# ---------------------------------------------------------------------
# Job + provider factories
# ---------------------------------------------------------------------
@pytest.fixture
def job() -> Callable[..., JobResult]:
    def _make(title: str = "Backend Engineer", location: str = "Remote", **kw: Any) -> JobResult:
        return make_job(
            title=title,
            location=location,
            company=kw.pop("company", "Acme"),
            ats_source=kw.pop("ats_source", "Test"),
            source_url=kw.pop("source_url", f"https://example.com/{title.lower().replace(' ', '-')}"),
            **kw,
        )

    return _make


DEFAULT_PROVIDER_NAMES = (
    "jsearch", *FREE_BUNDLE, "google_jobs", "career_pages", "linkedin", "google_search", "apify_quick",
)


@pytest.fixture
def stub_providers() -> Callable[..., dict[str, Any]]:
    """
    Build one StubProvider per default provider name (empty results), then
    apply per-name overrides: stub_providers(jsearch={"items": [...]}).
    """

    def _build(**overrides: dict[str, Any]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for name in DEFAULT_PROVIDER_NAMES + tuple(n for n in overrides if n not in DEFAULT_PROVIDER_NAMES):
            opts = {"source": name.replace("_", " ").title(), **overrides.get(name, {})}
            out[name] = StubProvider(name=name, **opts)
        out["career_page_suggestion"] = CareerPageSuggestionProvider()
        return out

    return _build
