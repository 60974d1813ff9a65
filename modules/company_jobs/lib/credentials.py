"""
Provider credentials.

The core never reads process-wide state for keys. Callers hand the engine a
CredentialStore; at the start of every search the engine takes one immutable
APIConfig snapshot from it and passes that to each provider.

A missing credential is not an error: the provider reports itself as skipped.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Protocol, runtime_checkable

log = logging.getLogger(__name__)

# credential name -> environment variable
ENV_VARS: dict[str, str] = {
    "jsearch": "JSEARCH_API_KEY",
    "serpapi": "SERPAPI_KEY",
    "diffbot": "DIFFBOT_TOKEN",
    "apify": "APIFY_TOKEN",
    "google_cse_key": "GOOGLE_CSE_KEY",
    "google_cse_id": "GOOGLE_CSE_ID",
}

CREDENTIAL_NAMES: tuple[str, ...] = tuple(ENV_VARS)


class CredentialStoreError(RuntimeError):
    """Raised when a backing credential file exists but cannot be read/written."""


@runtime_checkable
class CredentialStore(Protocol):
    def get(self, name: str) -> str | None: ...

    def set(self, name: str, value: str) -> None: ...


@dataclass(frozen=True)
class APIConfig:
    """Read-only credential snapshot for one search."""

    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        clean = {k: v.strip() for k, v in dict(self.values).items() if isinstance(v, str) and v.strip()}
        object.__setattr__(self, "values", MappingProxyType(clean))

    def get(self, name: str) -> str | None:
        return self.values.get(name)

    def has(self, *names: str) -> bool:
        return all(self.values.get(n) for n in names)

    @classmethod
    def from_store(cls, store: CredentialStore | None, names: Iterable[str] = CREDENTIAL_NAMES) -> APIConfig:
        if store is None:
            return cls()
        out: dict[str, str] = {}
        for n in names:
            v = store.get(n)
            if v:
                out[n] = v
        return cls(out)


class MemoryCredentialStore:
    """Dict-backed store; handy for tests and one-off scripts."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, name: str) -> str | None:
        return self._values.get(name) or None

    def set(self, name: str, value: str) -> None:
        self._values[name] = value


class EnvCredentialStore:
    """Reads credentials from environment variables (see ENV_VARS). Read-only."""

    def __init__(self, env_vars: Mapping[str, str] | None = None) -> None:
        self._env_vars = dict(env_vars or ENV_VARS)

    def get(self, name: str) -> str | None:
        var = self._env_vars.get(name)
        if not var:
            return None
        val = os.getenv(var)
        return val.strip() if val and val.strip() else None

    def set(self, name: str, value: str) -> None:
        raise CredentialStoreError(f"Environment credentials are read-only (tried to set {name!r}).")


class JsonFileCredentialStore:
    """
    Flat JSON object on disk: {"jsearch": "...", "apify": "..."}.
    Writes go through a temp file + os.replace so a crash never leaves half a file.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def _load(self) -> dict[str, str]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            raise CredentialStoreError(f"Cannot read credentials file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise CredentialStoreError(f"Credentials file {self.path} must contain a JSON object.")
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def get(self, name: str) -> str | None:
        return self._load().get(name) or None

    def set(self, name: str, value: str) -> None:
        data = self._load()
        data[name] = value
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".credentials-", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.chmod(tmp, 0o600)
            os.replace(tmp, self.path)
        except OSError as e:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise CredentialStoreError(f"Cannot write credentials file {self.path}: {e}") from e
        log.debug("stored credential %s in %s", name, self.path)


class ChainedCredentialStore:
    """First store with a value wins on read; writes go to the first store."""

    def __init__(self, *stores: CredentialStore) -> None:
        if not stores:
            raise ValueError("ChainedCredentialStore needs at least one store.")
        self.stores = stores

    def get(self, name: str) -> str | None:
        for s in self.stores:
            v = s.get(name)
            if v:
                return v
        return None

    def set(self, name: str, value: str) -> None:
        self.stores[0].set(name, value)


def default_store(credentials_path: str | None = None) -> CredentialStore:
    """File store (when a path is configured) backed by the environment."""
    if credentials_path:
        return ChainedCredentialStore(JsonFileCredentialStore(credentials_path), EnvCredentialStore())
    return EnvCredentialStore()
