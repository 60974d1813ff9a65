from __future__ import annotations

import os
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any


def truthy(v: Any) -> bool:
    """
    Normalize common truthy inputs from env/kwargs.
    Accepts bools or strings like: '1', 'true', 'yes', 'on'.
    """
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    if isinstance(v, (int, float)):
        return v != 0
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "on", "y", "t"}


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """
    UTC ISO-8601 timestamp with 'Z' suffix.
    """
    return now_utc().isoformat().replace("+00:00", "Z")


def getenv_str(name: str, default: str | None = None) -> str | None:
    """
    Typed wrapper for environment access. Blank values count as unset.
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return val.strip()


def clean_str(v: Any) -> str | None:
    """Stringify and strip; None for missing/blank values."""
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def first_str(*values: Any) -> str | None:
    """Return the first non-blank value as a stripped string."""
    for v in values:
        s = clean_str(v)
        if s:
            return s
    return None


def dig(obj: Any, *path: Any) -> Any:
    """
    Walk nested dicts/lists without raising, e.g. dig(job, "location", "name")
    or dig(job, "offices", 0, "name"). Returns None on any miss.
    """
    cur = obj
    for key in path:
        if isinstance(key, int):
            if not isinstance(cur, (list, tuple)) or not -len(cur) <= key < len(cur):
                return None
            cur = cur[key]
        else:
            if not isinstance(cur, dict):
                return None
            cur = cur.get(key)
        if cur is None:
            return None
    return cur


def uniq_preserve_order(items: Iterable[str]) -> list[str]:
    """Deduplicate while preserving first-seen order (exact match, blanks dropped)."""
    seen: set[str] = set()
    out: list[str] = []
    for it in items:
        if not it or it in seen:
            continue
        seen.add(it)
        out.append(it)
    return out
