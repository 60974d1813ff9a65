# company_jobs/providers/__init__.py
from __future__ import annotations

# Importing the adapter modules registers them.
from . import (  # noqa: F401
    apify,
    ashby,
    career_page,
    diffbot,
    free_apis,
    google_jobs,
    google_search,
    greenhouse,
    jsearch,
    lever,
    recruitee,
    rss,
    stub,
    workable,
)
from .base import Provider, ProviderError
from .registry import all_names, build_providers, get, register
from .stub import StubProvider

__all__ = [
    "Provider",
    "ProviderError",
    "StubProvider",
    "all_names",
    "build_providers",
    "get",
    "register",
]
