# modules/company_jobs/lib/__init__.py
from __future__ import annotations

# Re-export commonly-used types for convenience
from .config import ConfigError, Settings
from .credentials import APIConfig, CredentialStore, MemoryCredentialStore, default_store
from .engine import DEFAULT_STAGES, JobSearchEngine, Stage, run_search
from .identifiers import generate_identifiers
from .models import JobResult, ProviderResult, SearchResult
from .normalize import collect_suggestions, dedupe, is_generic, merge_results

__all__ = [
    "APIConfig",
    "ConfigError",
    "CredentialStore",
    "DEFAULT_STAGES",
    "JobResult",
    "JobSearchEngine",
    "MemoryCredentialStore",
    "ProviderResult",
    "SearchResult",
    "Settings",
    "Stage",
    "collect_suggestions",
    "dedupe",
    "default_store",
    "generate_identifiers",
    "is_generic",
    "merge_results",
    "run_search",
]
