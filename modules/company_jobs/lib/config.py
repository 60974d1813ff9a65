from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any

import yaml

from .companies import KNOWN_COMPANIES
from .utils import getenv_str, truthy

SETTINGS_PATH_ENV = "COMPANY_JOBS_SETTINGS"
CREDENTIALS_PATH_ENV = "COMPANY_JOBS_CREDENTIALS"

# Scalar fields that can be overridden as COMPANY_JOBS_<FIELD> (e.g. COMPANY_JOBS_SKIP_NETWORK=1)
ENV_PREFIX = "COMPANY_JOBS_"
ENV_FIELDS: tuple[str, ...] = (
    "default_timeout",
    "http_timeout",
    "max_results",
    "description_limit",
    "dedupe_include_company",
    "known_companies",
    "apify_poll_interval",
    "linkedin_timeout",
    "apify_quick_timeout",
    "apify_deep_timeout",
    "skip_network",
    "user_agent",
)

# Per-provider ceilings (seconds). Anything not listed uses default_timeout.
DEFAULT_TIMEOUTS: dict[str, float] = {
    "jsearch": 15.0,
    "google_jobs": 5.0,
    "career_pages": 8.0,
    "google_search": 8.0,
    # Actor providers poll internally; the outer ceiling leaves room for the
    # final dataset fetch after the poll deadline.
    "linkedin": 35.0,
    "apify_quick": 75.0,
    "apify_deep": 300.0,
}


# -----------------------------
# Exceptions
# -----------------------------
class ConfigError(ValueError):
    """Raised when provided kwargs/env/file cannot form valid Settings."""


# -----------------------------
# Models
# -----------------------------
@dataclass
class Settings:
    """
    Runtime configuration for company job searches.

    Built from (lowest to highest precedence): defaults, an optional settings
    file (JSON or YAML), COMPANY_JOBS_<FIELD> environment variables, explicit
    kwargs.
    """

    # Timeouts
    timeouts: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_TIMEOUTS))
    default_timeout: float = 15.0
    http_timeout: float = 15.0

    # Result shaping
    max_results: int = 10
    description_limit: int = 200
    dedupe_include_company: bool = False

    # Known-company stage
    known_companies: tuple[str, ...] = KNOWN_COMPANIES

    # Actor polling
    apify_poll_interval: float = 3.0
    linkedin_timeout: float = 10.0
    apify_quick_timeout: float = 30.0
    apify_deep_timeout: float = 90.0

    # Misc
    credentials_path: str | None = None
    skip_network: bool = False
    user_agent: str = "CompanyJobs/0.1 (+https://example.invalid)"

    # ------------- convenience -------------
    def timeout_for(self, provider_name: str) -> float:
        return float(self.timeouts.get(provider_name, self.default_timeout))

    # ------------- constructors -------------
    @classmethod
    def from_env_and_kwargs(cls, kwargs: Mapping[str, Any] | None = None) -> Settings:
        """
        Build Settings with validation.

        Expected kwargs (all optional):

            settings_path: str            # JSON/YAML file with any field below
            timeouts: {provider: seconds} # merged over DEFAULT_TIMEOUTS
            default_timeout: float = 15
            http_timeout: float = 15
            max_results: int = 10
            description_limit: int = 200
            dedupe_include_company: bool = false
            known_companies: list[str]
            apify_poll_interval: float = 3
            linkedin_timeout / apify_quick_timeout / apify_deep_timeout: float
            credentials_path: str         # env COMPANY_JOBS_CREDENTIALS
            skip_network: bool = false
            user_agent: str
        """
        kw = dict(kwargs or {})

        path = kw.pop("settings_path", None) or getenv_str(SETTINGS_PATH_ENV)
        merged: dict[str, Any] = {}
        if path:
            merged.update(load_settings_file(str(path)))
        merged.update(_env_overrides())
        merged.update({k: v for k, v in kw.items() if v is not None})

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(merged) - known)
        if unknown:
            raise ConfigError(f"Unknown setting(s): {', '.join(unknown)}")

        try:
            timeouts = dict(DEFAULT_TIMEOUTS)
            raw_timeouts = merged.get("timeouts") or {}
            if not isinstance(raw_timeouts, Mapping):
                raise ConfigError("'timeouts' must be a mapping of provider -> seconds.")
            timeouts.update({str(k): float(v) for k, v in raw_timeouts.items()})

            known_companies = merged.get("known_companies", KNOWN_COMPANIES)
            if isinstance(known_companies, str):
                known_companies = known_companies.split(",")
            known_companies = tuple(str(x).strip().lower() for x in known_companies if str(x).strip())

            settings = cls(
                timeouts=timeouts,
                default_timeout=float(merged.get("default_timeout", 15.0)),
                http_timeout=float(merged.get("http_timeout", 15.0)),
                max_results=int(merged.get("max_results", 10)),
                description_limit=int(merged.get("description_limit", 200)),
                dedupe_include_company=truthy(merged.get("dedupe_include_company")),
                known_companies=known_companies,
                apify_poll_interval=float(merged.get("apify_poll_interval", 3.0)),
                linkedin_timeout=float(merged.get("linkedin_timeout", 10.0)),
                apify_quick_timeout=float(merged.get("apify_quick_timeout", 30.0)),
                apify_deep_timeout=float(merged.get("apify_deep_timeout", 90.0)),
                credentials_path=str(merged.get("credentials_path") or "").strip() or None,
                skip_network=truthy(merged.get("skip_network")),
                user_agent=str(merged.get("user_agent") or cls.user_agent),
            )
        except (TypeError, ValueError) as e:
            if isinstance(e, ConfigError):
                raise
            raise ConfigError(f"Invalid setting value: {e}") from e

        _validate_settings(settings)
        return settings


# -----------------------------
# Helpers
# -----------------------------
def load_settings_file(path: str) -> dict[str, Any]:
    """Read a JSON or YAML (by extension) settings object."""
    try:
        with open(path, encoding="utf-8") as f:
            if os.path.splitext(path)[1].lower() in {".yaml", ".yml"}:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"settings file not found: {path}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"settings file is invalid: {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"settings file must contain an object: {path}")
    return data


def _env_overrides() -> dict[str, str]:
    """COMPANY_JOBS_<FIELD> values (and COMPANY_JOBS_CREDENTIALS) that are set, keyed by field name."""
    out: dict[str, str] = {}
    for name in ENV_FIELDS:
        val = getenv_str(ENV_PREFIX + name.upper())
        if val is not None:
            out[name] = val
    creds = getenv_str(CREDENTIALS_PATH_ENV)
    if creds is not None:
        out["credentials_path"] = creds
    return out


def _validate_settings(s: Settings) -> None:
    for name, val in s.timeouts.items():
        if val <= 0:
            raise ConfigError(f"timeout for {name!r} must be > 0 (got {val}).")
    for name in ("default_timeout", "http_timeout", "apify_poll_interval",
                 "linkedin_timeout", "apify_quick_timeout", "apify_deep_timeout"):
        if getattr(s, name) <= 0:
            raise ConfigError(f"'{name}' must be > 0.")
    if s.max_results <= 0:
        raise ConfigError("'max_results' must be >= 1.")
    if s.description_limit < 0:
        raise ConfigError("'description_limit' cannot be negative.")
    if s.apify_poll_interval >= s.apify_quick_timeout:
        raise ConfigError("'apify_poll_interval' must be shorter than 'apify_quick_timeout'.")
