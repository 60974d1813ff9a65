from __future__ import annotations

from typing import Any

from ..config import Settings
from ..http_client import HttpClient

# Global in-process registry: provider name -> provider class
_REGISTRY: dict[str, type[Any]] = {}


def register(cls: type[Any]) -> type[Any]:
    """
    Class decorator or direct call to register a provider class.
    Requires cls.name to be a non-empty string.
    """
    name = getattr(cls, "name", "") or ""
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"Cannot register provider {cls!r}: missing/empty 'name'.")
    key = name.strip().lower()
    if key in _REGISTRY and _REGISTRY[key] is not cls:
        # Allow idempotent re-registers of the same class; otherwise reject.
        raise ValueError(f"Provider {key!r} already registered to {_REGISTRY[key]!r}.")
    _REGISTRY[key] = cls
    return cls


def get(name: str) -> type[Any]:
    """
    Look up a provider class by name (case-insensitive).
    Raises KeyError if not found.
    """
    key = (name or "").strip().lower()
    if key not in _REGISTRY:
        raise KeyError(f"No provider registered for name {name!r}.")
    return _REGISTRY[key]


def all_names() -> dict[str, type[Any]]:
    """
    Return a shallow copy of the registry (useful for debugging/tests).
    """
    return dict(_REGISTRY)


def build_providers(
    settings: Settings,
    client: HttpClient | None = None,
    *,
    exclude: tuple[str, ...] = ("stub",),
) -> dict[str, Any]:
    """
    Instantiate every registered provider around one shared HttpClient.
    The stub is excluded by default; it only makes sense with explicit items.
    """
    client = client or HttpClient(timeout=settings.http_timeout, user_agent=settings.user_agent)
    return {
        key: cls(settings=settings, client=client)
        for key, cls in _REGISTRY.items()
        if key not in exclude
    }
