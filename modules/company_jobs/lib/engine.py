"""
Engine for company job searches: staged provider fan-out, merge, and summary.

Features:
  - Ordered stage descriptors, each with a predicate and a provider bundle
  - Concurrent fan-out inside a stage (settle all, then inspect each)
  - Per-provider timeouts; a timeout is just another provider failure
  - Short-circuit after the first stage that yields a concrete job
  - One merge (generic filter + dedup) over everything accumulated
  - Independent lanes of stages run side by side (hybrid search)
  - Comprehensive logging via `logging_bridge`
"""

from __future__ import annotations

import asyncio
import functools
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from . import logging_bridge
from .companies import is_known_company
from .config import ConfigError, Settings
from .credentials import APIConfig, CredentialStore, default_store
from .http_client import HttpClient, describe_error
from .models import JobResult, ProviderResult, SearchResult
from .normalize import collect_suggestions, merge_results
from .providers.base import Provider

# Providers that never touch the network; excluded from the exhaustive bundle
OFFLINE_PROVIDERS = frozenset({"stub", "career_page_suggestion"})
SUGGESTION_PROVIDER = "career_page_suggestion"

FREE_BUNDLE: tuple[str, ...] = ("rss", "free_apis", "greenhouse", "lever", "workable", "ashby", "recruitee")
SEARCH_MODES: tuple[str, ...] = ("staged", "fast", "exhaustive", "apify", "apify_deep", "hybrid")


# =============================================================================
# SEARCH STATE
# =============================================================================
@dataclass
class SearchContext:
    """Mutable per-search accumulator. Only the engine writes to it, between stages."""

    company_name: str
    settings: Settings
    jobs: list[JobResult] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    attempted: set[str] = field(default_factory=set)
    stages_run: list[str] = field(default_factory=list)
    durations_us: dict[str, int] = field(default_factory=dict)

    def concrete_jobs(self) -> list[JobResult]:
        return merge_results(self.jobs, include_company=self.settings.dedupe_include_company)

    @property
    def has_concrete(self) -> bool:
        return bool(self.concrete_jobs())

    def absorb(self, other: SearchContext) -> None:
        """Append another lane's findings after this one's (dedup precedence follows)."""
        self.jobs.extend(other.jobs)
        self.sources.extend(s for s in other.sources if s not in self.sources)
        self.errors.extend(other.errors)
        self.attempted |= other.attempted
        self.stages_run.extend(other.stages_run)
        self.durations_us.update(other.durations_us)


# =============================================================================
# STAGES
# =============================================================================
def always(ctx: SearchContext) -> bool:
    return True


def known_company(ctx: SearchContext) -> bool:
    return is_known_company(ctx.company_name, ctx.settings.known_companies)


def nothing_found(ctx: SearchContext) -> bool:
    return not ctx.has_concrete


@dataclass(frozen=True)
class Stage:
    """
    One phase of the fallback policy.

    name: label for logs and SearchResult.stages
    providers: provider names run concurrently, in declaration order
    predicate: stage runs only when predicate(ctx) is true
    timeouts: per-provider seconds; overrides Settings.timeout_for()
    skip_attempted: leave out providers already called earlier in this search
    """

    name: str
    providers: tuple[str, ...]
    predicate: Callable[[SearchContext], bool] = always
    timeouts: Mapping[str, float] = field(default_factory=dict)
    skip_attempted: bool = False


DEFAULT_STAGES: tuple[Stage, ...] = (
    Stage("primary", ("jsearch",)),
    Stage("known_company", FREE_BUNDLE, predicate=known_company),
    Stage(
        "credentialed",
        ("google_jobs", "career_pages", "linkedin", "google_search"),
        predicate=nothing_found,
        timeouts={"google_jobs": 5.0, "career_pages": 8.0, "linkedin": 10.0, "google_search": 8.0},
    ),
    Stage("last_resort_free", FREE_BUNDLE, predicate=nothing_found, skip_attempted=True),
    Stage("last_resort_actor", ("apify_quick",), predicate=nothing_found),
)


# =============================================================================
# ENGINE
# =============================================================================
class JobSearchEngine:
    """
    Runs searches against a set of providers under a staged fallback policy.

    Args:
        settings: Settings; defaults to Settings().
        credential_store: where provider credentials come from; defaults to
            the credentials file (if configured) backed by the environment.
            Read once per search into an immutable APIConfig.
        providers: name -> provider (or an iterable of providers); defaults to
            every registered adapter sharing one HttpClient.
        stages: ordered Stage descriptors; defaults to DEFAULT_STAGES.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        credential_store: CredentialStore | None = None,
        providers: Mapping[str, Any] | Iterable[Any] | None = None,
        stages: Sequence[Stage] | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.credential_store = (
            credential_store if credential_store is not None else default_store(self.settings.credentials_path)
        )

        self._client: HttpClient | None = None
        if providers is None:
            from .providers.registry import build_providers

            self._client = HttpClient(timeout=self.settings.http_timeout, user_agent=self.settings.user_agent)
            providers = build_providers(self.settings, self._client)
        elif not isinstance(providers, Mapping):
            providers = {p.name: p for p in providers}
        self.providers: dict[str, Any] = dict(providers)

        self.stages: tuple[Stage, ...] = tuple(stages) if stages is not None else DEFAULT_STAGES
        _validate(self.providers, self.stages)

    # ------------- public API -------------
    async def search(self, company_name: str) -> SearchResult:
        """Staged search: cheap/free sources first, paid and slow ones only if needed."""
        return await self._run(company_name, self.stages, mode="staged")

    async def search_fast(self, company_name: str) -> SearchResult:
        """Only the keyless bundle, in one stage."""
        names = tuple(n for n in FREE_BUNDLE if n in self.providers)
        return await self._run(company_name, (Stage("fast", names),), mode="fast")

    async def search_exhaustive(self, company_name: str) -> SearchResult:
        """Every network provider at once, bypassing the policy."""
        names = tuple(n for n in self.providers if n not in OFFLINE_PROVIDERS)
        return await self._run(company_name, (Stage("exhaustive", names),), mode="exhaustive")

    async def search_apify(self, company_name: str, deep: bool = False) -> SearchResult:
        """Only the Apify actor bundle: quick (job boards) or deep (boards + career-page scrapers)."""
        name = "apify_deep" if deep else "apify_quick"
        names = (name,) if name in self.providers else ()
        mode = "apify_deep" if deep else "apify"
        return await self._run(company_name, (Stage(mode, names),), mode=mode)

    async def search_hybrid(self, company_name: str) -> SearchResult:
        """
        Staged search and the quick Apify bundle side by side, merged.

        The staged lane leaves out apify_quick since the second lane already
        runs it; staged results take dedup precedence.
        """
        staged = tuple(
            replace(s, providers=tuple(n for n in s.providers if n != "apify_quick"))
            for s in self.stages
        )
        staged = tuple(s for s in staged if s.providers)
        actors = (Stage("apify", ("apify_quick",)),) if "apify_quick" in self.providers else ()
        return await self._run(company_name, staged, actors, mode="hybrid")

    def provider_status(self) -> dict[str, bool]:
        """provider name -> usable with the credentials currently in the store."""
        config = APIConfig.from_store(self.credential_store)
        return {name: config.has(*getattr(p, "credentials", ())) for name, p in self.providers.items()}

    def close(self) -> None:
        if self._client is not None:
            self._client.close()

    # ------------- internals -------------
    async def _run(self, company_name: str, *lanes: Sequence[Stage], mode: str) -> SearchResult:
        name = (company_name or "").strip()
        if not name:
            raise ValueError("company_name must be a non-empty string.")

        start_ns = time.perf_counter_ns()
        config = APIConfig.from_store(self.credential_store)

        logging_bridge.activity({
            "component": "company_jobs.engine",
            "op": "search_start",
            "company": name,
            "mode": mode,
            "stages": [s.name for lane in lanes for s in lane],
            "skip_network": self.settings.skip_network,
        })

        # Each lane keeps its own context; lanes are merged in the order given.
        contexts = await asyncio.gather(*(self._run_lane(name, lane, config) for lane in lanes))
        ctx = SearchContext(company_name=name, settings=self.settings)
        for lane_ctx in contexts:
            ctx.absorb(lane_ctx)

        result = await self._finish(ctx, config)

        logging_bridge.activity({
            "component": "company_jobs.engine",
            "op": "summary",
            "company": name,
            "mode": mode,
            "success": result.success,
            "total_found": result.total_found,
            "sources": list(result.sources),
            "error_count": len(result.errors or ()),
            "stages": list(ctx.stages_run),
            "durations_us": dict(ctx.durations_us),
            "total_us": int((time.perf_counter_ns() - start_ns) // 1000),
        })
        return result

    async def _run_lane(self, company_name: str, stages: Sequence[Stage], config: APIConfig) -> SearchContext:
        ctx = SearchContext(company_name=company_name, settings=self.settings)
        for stage in stages:
            if not stage.predicate(ctx):
                continue
            await self._run_stage(stage, ctx, config)
            if ctx.has_concrete:
                break
        return ctx

    async def _run_stage(self, stage: Stage, ctx: SearchContext, config: APIConfig) -> None:
        names = [n for n in stage.providers if not (stage.skip_attempted and n in ctx.attempted)]
        ctx.stages_run.append(stage.name)

        logging_bridge.activity({
            "component": "company_jobs.engine",
            "op": "stage_start",
            "company": ctx.company_name,
            "stage": stage.name,
            "providers": names,
        })

        if self.settings.skip_network:
            for n in names:
                self._log_skip(ctx, stage, n, "skip_network")
            return

        timeouts = {n: float(stage.timeouts.get(n, self.settings.timeout_for(n))) for n in names}
        settled = await asyncio.gather(
            *(self._call(n, ctx.company_name, config, timeouts[n]) for n in names),
            return_exceptions=True,
        )

        # Accumulate only after the whole stage settled, in declaration order.
        found = 0
        for n, outcome in zip(names, settled):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                # _call converts everything it can; this is a last line of defence.
                outcome = ProviderResult.failed(
                    self._source(n), f"{self._source(n)}: {describe_error(outcome)}"
                )
            result, dt_us = outcome if isinstance(outcome, tuple) else (outcome, 0)
            ctx.durations_us[n] = dt_us

            if result.skipped:
                self._log_skip(ctx, stage, n, "missing_credentials")
                continue

            ctx.attempted.add(n)
            if result.success:
                ctx.jobs.extend(result.jobs)
                found += len(result.jobs)
                if result.jobs and result.source not in ctx.sources:
                    ctx.sources.append(result.source)
                logging_bridge.activity({
                    "component": "company_jobs.engine",
                    "op": "provider_done",
                    "company": ctx.company_name,
                    "stage": stage.name,
                    "provider": n,
                    "jobs": len(result.jobs),
                    "duration_us": dt_us,
                })
            else:
                reason = result.error or f"{result.source}: failed"
                ctx.errors.append(reason)
                logging_bridge.error({
                    "component": "company_jobs.engine",
                    "op": "provider_failed",
                    "company": ctx.company_name,
                    "stage": stage.name,
                    "provider": n,
                    "error": reason,
                    "duration_us": dt_us,
                })

        logging_bridge.activity({
            "component": "company_jobs.engine",
            "op": "stage_done",
            "company": ctx.company_name,
            "stage": stage.name,
            "jobs": found,
            "concrete_total": len(ctx.concrete_jobs()),
            "errors_total": len(ctx.errors),
        })

    async def _call(
        self, name: str, company_name: str, config: APIConfig, timeout: float
    ) -> tuple[ProviderResult, int]:
        provider = self.providers[name]
        source = self._source(name)
        t0 = time.perf_counter_ns()
        try:
            result = await asyncio.wait_for(provider.fetch(company_name, config), timeout=timeout)
        except asyncio.TimeoutError:
            result = ProviderResult.failed(source, f"{source}: timed out after {timeout:g}s")
        except Exception as e:
            # Adapters are supposed to never raise; a third-party one might.
            result = ProviderResult.failed(source, f"{source}: {describe_error(e)}")
        if not isinstance(result, ProviderResult):
            result = ProviderResult.failed(source, f"{source}: invalid provider response")
        return result, int((time.perf_counter_ns() - t0) // 1000)

    async def _finish(self, ctx: SearchContext, config: APIConfig) -> SearchResult:
        jobs = ctx.concrete_jobs()
        success = bool(jobs)

        suggestions: list[JobResult] = []
        if not success:
            pool = list(ctx.jobs)
            if SUGGESTION_PROVIDER in self.providers:
                hint, _ = await self._call(
                    SUGGESTION_PROVIDER, ctx.company_name, config, self.settings.timeout_for(SUGGESTION_PROVIDER)
                )
                if hint.success:
                    pool.extend(hint.jobs)
                else:
                    logging_bridge.error({
                        "component": "company_jobs.engine",
                        "op": "suggestion_failed",
                        "company": ctx.company_name,
                        "error": hint.error,
                    })
            suggestions = collect_suggestions(pool)

        return SearchResult(
            success=success,
            jobs=tuple(jobs),
            sources=tuple(ctx.sources),
            total_found=len(jobs),
            errors=tuple(ctx.errors) if ctx.errors else None,
            suggestions=tuple(suggestions),
            stages=tuple(ctx.stages_run),
        )

    def _source(self, name: str) -> str:
        return str(getattr(self.providers.get(name), "source", "") or name)

    def _log_skip(self, ctx: SearchContext, stage: Stage, name: str, reason: str) -> None:
        logging_bridge.activity({
            "component": "company_jobs.engine",
            "op": "provider_skipped",
            "company": ctx.company_name,
            "stage": stage.name,
            "provider": name,
            "reason": reason,
        })


def _validate(providers: Mapping[str, Any], stages: Sequence[Stage]) -> None:
    for name, p in providers.items():
        if not isinstance(p, Provider):
            raise ConfigError(f"Provider {name!r} does not implement fetch()/name/source/credentials.")
    for stage in stages:
        unknown = [n for n in stage.providers if n not in providers]
        if unknown:
            raise ConfigError(f"Stage {stage.name!r} references unknown provider(s): {', '.join(unknown)}")


def run_search(
    company_name: str,
    *,
    mode: str = "staged",
    settings: Settings | None = None,
    credential_store: CredentialStore | None = None,
) -> SearchResult:
    """Blocking convenience wrapper for scripts and the CLI."""
    if mode not in SEARCH_MODES:
        raise ValueError(f"Unknown search mode {mode!r}; expected one of {list(SEARCH_MODES)}.")
    engine = JobSearchEngine(settings=settings, credential_store=credential_store)
    runners = {
        "staged": engine.search,
        "fast": engine.search_fast,
        "exhaustive": engine.search_exhaustive,
        "apify": engine.search_apify,
        "apify_deep": functools.partial(engine.search_apify, deep=True),
        "hybrid": engine.search_hybrid,
    }
    try:
        return asyncio.run(runners[mode](company_name))
    finally:
        engine.close()
