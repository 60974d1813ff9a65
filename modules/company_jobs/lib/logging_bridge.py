from __future__ import annotations

import copy
import logging
from typing import Any

# Prefer the service's JSONL writer; default to stdlib logging when the module
# runs outside the service tree. No prints; this module is silent on import.
try:
    from service import logging_utils as _logging_backend
except ImportError:
    _logging_backend = None

# Keys that should be redacted from structured logs
_REDACT_KEYS = {
    "password",
    "token",
    "apikey",
    "api_key",
    "key",
    "secret",
    "authorization",
    "auth",
    "bearer",
    "credentials",
}


def _redact_record(record: dict[str, Any]) -> dict[str, Any]:
    """
    Shallow-copy record and redact obvious secret-like fields at top level.
    The service backend redacts nested structures on its own.
    """
    redacted = copy.copy(record)
    for k in list(redacted.keys()):
        lk = str(k).lower()
        if lk in _REDACT_KEYS or lk.endswith("_token") or lk.endswith("_secret") or lk.endswith("_key"):
            redacted[k] = "***REDACTED***"
    return redacted


def activity(record: dict[str, Any]) -> None:
    """
    Write an activity record to the service log writer if available.
    Falls back to stdlib logging as structured info.
    """
    payload = _redact_record(record)
    if _logging_backend is not None:
        try:
            _logging_backend.write_activity_log(payload)
            return
        except (OSError, TypeError, ValueError):
            logging.getLogger("company_jobs.activity").debug("activity backend failed", exc_info=True)
    logging.getLogger("company_jobs.activity").info(payload)


def error(record: dict[str, Any]) -> None:
    """
    Write an error record to the service log writer if available.
    Falls back to stdlib logging as structured warning: provider failures are
    expected and never fatal to a search.
    """
    payload = _redact_record(record)
    if _logging_backend is not None:
        try:
            _logging_backend.write_error_log(payload)
            return
        except (OSError, TypeError, ValueError):
            logging.getLogger("company_jobs.error").debug("error backend failed", exc_info=True)
    logging.getLogger("company_jobs.error").warning(payload)
