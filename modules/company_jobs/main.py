from __future__ import annotations

from typing import Any

from .lib.config import ConfigError, Settings
from .lib.credentials import default_store
from .lib.engine import run_search
from .lib.logging_bridge import activity as log_activity


def run(**kwargs: Any) -> dict[str, Any]:
    """
    Entry point for the 'company_jobs' module.

    Accepts kwargs (from the CLI or another runner), including:
      company: str                       # REQUIRED
      mode: "staged" | "fast" | "exhaustive" | "apify" | "apify_deep" | "hybrid" = "staged"

      # Everything else is passed to Settings.from_env_and_kwargs, e.g.
      settings_path: str
      credentials_path: str
      timeouts: {provider: seconds}
      skip_network: bool = False

    Returns:
      SearchResult in its wire form (camelCase dict).
    """
    company = str(kwargs.pop("company", "") or "").strip()
    mode = str(kwargs.pop("mode", "staged") or "staged").strip().lower()
    if not company:
        raise ConfigError("'company' is required.")

    # Build validated settings from env + kwargs
    settings = Settings.from_env_and_kwargs(kwargs)

    # Log a small start record (structured; no prints)
    log_activity({
        "component": "company_jobs.main",
        "op": "start",
        "company": company,
        "mode": mode,
        "flags": {
            "skip_network": settings.skip_network,
            "dedupe_include_company": settings.dedupe_include_company,
        },
    })

    result = run_search(
        company,
        mode=mode,
        settings=settings,
        credential_store=default_store(settings.credentials_path),
    )
    return result.to_dict()
