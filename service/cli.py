# service/cli.py
"""
Command-line entrypoints.

Subcommands
-----------
search COMPANY [--mode staged|fast|exhaustive|apify|apify_deep|hybrid] [--json] [--set k=v ...]
    - Runs one company search via modules.company_jobs and prints the jobs
      (or the full SearchResult as JSON)

providers
    - Lists every provider and whether its credentials are configured

suggest QUERY [--limit N]
    - Ranked company-name suggestions from the built-in directory

set-key NAME VALUE
    - Stores a provider credential in the credentials file
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import os
import sys
import time
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from modules.company_jobs.lib.companies import suggest_companies
from modules.company_jobs.lib.config import ConfigError, Settings
from modules.company_jobs.lib.credentials import (
    CREDENTIAL_NAMES,
    ENV_VARS,
    CredentialStoreError,
    JsonFileCredentialStore,
    default_store,
)
from modules.company_jobs.lib.engine import SEARCH_MODES, JobSearchEngine, run_search
from service import logging_utils as L

LOG = logging.getLogger("service.cli")

DEFAULT_CREDENTIALS_PATH = os.path.join("local", "credentials.json")


# ----------------------------- Logging setup ---------------------------------
def _ensure_logging() -> None:
    """Initialize a reasonable logging setup if none exists yet."""
    root = logging.getLogger()
    if not root.handlers:
        level = os.getenv("LOG_LEVEL", "WARNING").upper()
        logging.basicConfig(
            level=getattr(logging, level, logging.WARNING),
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )


# -------------------------- Utility / glue code ------------------------------
def _parse_kv_pairs(pairs: Iterable[str]) -> dict[str, Any]:
    """
    Parse key=value strings into a dict.
    - Values that look like JSON (true/false/null/number/object/array) are parsed.
    - Otherwise keep as raw strings.
    """
    out: dict[str, Any] = {}
    for raw in pairs:
        if "=" not in raw:
            raise argparse.ArgumentTypeError(f"--set item must be key=value (got {raw!r})")
        k, v = raw.split("=", 1)
        k = k.strip()
        v = v.strip()
        if not k:
            raise argparse.ArgumentTypeError(f"Invalid key in --set item {raw!r}")
        try:
            out[k] = json.loads(v)
        except ValueError:
            out[k] = v
    return out


def _print_table(rows: Iterable[tuple[str, ...]], headers: tuple[str, ...]) -> None:
    """Very simple fixed-width table printer."""
    rows = [tuple(str(c) for c in r) for r in rows]
    widths = [max([len(h)] + [len(r[i]) for r in rows]) for i, h in enumerate(headers)]
    sep = "+-" + "-+-".join("-" * w for w in widths) + "-+"
    print(sep)
    print("| " + " | ".join(h.ljust(w) for h, w in zip(headers, widths)) + " |")
    print(sep)
    for r in rows:
        print("| " + " | ".join(c.ljust(w) for c, w in zip(r, widths)) + " |")
    print(sep)


def _now_iso() -> str:
    return datetime.now().astimezone().isoformat()


def _settings(args: argparse.Namespace) -> Settings:
    kwargs = _parse_kv_pairs(getattr(args, "set", None) or [])
    if args.settings:
        kwargs["settings_path"] = args.settings
    if args.credentials:
        kwargs["credentials_path"] = args.credentials
    settings = Settings.from_env_and_kwargs(kwargs)
    if not settings.credentials_path:
        # nothing configured: local/credentials.json, for reads and set-key alike
        settings = dataclasses.replace(settings, credentials_path=DEFAULT_CREDENTIALS_PATH)
    return settings


# ------------------------------ Subcommands ----------------------------------
def cmd_search(args: argparse.Namespace) -> int:
    start_time = time.monotonic()
    try:
        settings = _settings(args)
        result = run_search(
            args.company,
            mode=args.mode,
            settings=settings,
            credential_store=default_store(settings.credentials_path),
        )
    except KeyboardInterrupt:
        return 130
    except (ConfigError, CredentialStoreError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        L.write_error_log({
            "ts": _now_iso(),
            "where": "cli.search",
            "company": args.company,
            "error": repr(e),
            "duration_ms": int((time.monotonic() - start_time) * 1000),
        })
        return 2

    L.write_activity_log({
        "ts": _now_iso(),
        "event": "cli_search",
        "company": args.company,
        "mode": args.mode,
        "success": result.success,
        "total_found": result.total_found,
        "duration_ms": int((time.monotonic() - start_time) * 1000),
    })

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return 0 if result.success else 1

    if result.jobs:
        _print_table(
            ((j.title, j.location, j.company, j.ats_source, j.date_posted or "") for j in result.jobs),
            headers=("TITLE", "LOCATION", "COMPANY", "SOURCE", "POSTED"),
        )
        print(f"{result.total_found} job(s) from {', '.join(result.sources)}")
    else:
        print(f"No jobs found for {args.company!r}.")
        for s in result.suggestions:
            print(f"  try: {s.title} -> {s.source_url}")
    for err in result.errors or ():
        print(f"  ! {err}", file=sys.stderr)
    return 0 if result.success else 1


def cmd_providers(args: argparse.Namespace) -> int:
    try:
        settings = _settings(args)
        engine = JobSearchEngine(settings=settings, credential_store=default_store(settings.credentials_path))
    except (ConfigError, CredentialStoreError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    try:
        status = engine.provider_status()
        rows = []
        for name, provider in engine.providers.items():
            needs = ", ".join(ENV_VARS.get(c, c) for c in provider.credentials) or "-"
            rows.append((name, provider.source, needs, "yes" if status[name] else "no"))
        _print_table(rows, headers=("PROVIDER", "SOURCE", "NEEDS", "READY"))
    finally:
        engine.close()
    return 0


def cmd_suggest(args: argparse.Namespace) -> int:
    matches = suggest_companies(args.query, limit=args.limit)
    if not matches:
        print(f"No companies match {args.query!r}.")
        return 1
    _print_table(
        ((m.name, m.domain or "", m.industry or "", m.location or "") for m in matches),
        headers=("NAME", "DOMAIN", "INDUSTRY", "LOCATION"),
    )
    return 0


def cmd_set_key(args: argparse.Namespace) -> int:
    if args.name not in CREDENTIAL_NAMES:
        print(f"ERROR: unknown credential {args.name!r}; expected one of {', '.join(CREDENTIAL_NAMES)}",
              file=sys.stderr)
        return 2
    try:
        path = _settings(args).credentials_path
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    try:
        JsonFileCredentialStore(path).set(args.name, args.value)
    except CredentialStoreError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    L.write_activity_log({"ts": _now_iso(), "event": "cli_set_key", "name": args.name, "path": path})
    print(f"Stored {args.name} in {path}")
    return 0


# ------------------------------- Argparse ------------------------------------
def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="python -m service.cli",
        description="Company job search tools",
    )
    p.add_argument("--settings", help="Settings file (.json/.yaml); falls back to COMPANY_JOBS_SETTINGS.")
    p.add_argument("--credentials", help="Credentials JSON file; falls back to COMPANY_JOBS_CREDENTIALS.")
    sub = p.add_subparsers(dest="cmd", required=True)

    # search
    sp = sub.add_parser("search", help="Search job listings for a company.")
    sp.add_argument("company", help="Company name, e.g. 'Netflix'.")
    sp.add_argument("--mode", choices=SEARCH_MODES, default="staged")
    sp.add_argument("--json", action="store_true", help="Print the full result as JSON.")
    sp.add_argument(
        "--set",
        metavar="k=v",
        nargs="*",
        help="Settings overrides (JSON values supported), e.g. max_results=5.",
    )
    sp.set_defaults(func=cmd_search)

    # providers
    sp = sub.add_parser("providers", help="Show providers and credential status.")
    sp.set_defaults(func=cmd_providers)

    # suggest
    sp = sub.add_parser("suggest", help="Suggest company names for a partial query.")
    sp.add_argument("query")
    sp.add_argument("--limit", type=int, default=8)
    sp.set_defaults(func=cmd_suggest)

    # set-key
    sp = sub.add_parser("set-key", help="Store a provider credential.")
    sp.add_argument("name", help=f"One of: {', '.join(CREDENTIAL_NAMES)}")
    sp.add_argument("value")
    sp.set_defaults(func=cmd_set_key)

    return p


# --------------------------------- Main --------------------------------------
def main(argv: Iterable[str] | None = None) -> int:
    _ensure_logging()
    parser = _build_parser()
    args = parser.parse_args(args=list(argv) if argv is not None else None)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
