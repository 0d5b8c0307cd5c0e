from __future__ import annotations

import hashlib
import json
import threading
import time
from typing import Any

from .config import DEFAULT_RECOMMENDATION_CONFIG

_cache: dict[str, dict[str, Any]] = {}
_hits: int = 0
_misses: int = 0
_lock = threading.Lock()


def _make_key(namespace: str, request_dict: dict) -> str:
    normalized = json.dumps(request_dict, sort_keys=True, default=str)
    digest = hashlib.sha256(normalized.encode()).hexdigest()[:16]
    return f"{namespace}:{digest}"


def _sweep_expired(ttl: int, now: float) -> None:
    expired = [key for key, entry in _cache.items() if now - entry["created_at"] >= ttl]
    for key in expired:
        del _cache[key]


def cache_get(
    namespace: str,
    request_dict: dict,
    ttl: int = DEFAULT_RECOMMENDATION_CONFIG.cache_ttl_seconds,
    version: Any = None,
) -> Any | None:
    """Return the cached value, or ``None`` when missing, expired or stored under another *version*."""
    global _hits, _misses
    key = _make_key(namespace, request_dict)
    with _lock:
        entry = _cache.get(key)
        if entry and time.time() - entry["created_at"] < ttl and entry["version"] == version:
            _hits += 1
            return entry["value"]
        if entry:
            del _cache[key]
        _misses += 1
        return None


def cache_set(
    namespace: str,
    request_dict: dict,
    value: Any,
    version: Any = None,
    ttl: int = DEFAULT_RECOMMENDATION_CONFIG.cache_ttl_seconds,
) -> None:
    now = time.time()
    with _lock:
        _sweep_expired(ttl, now)
        _cache[_make_key(namespace, request_dict)] = {
            "value": value,
            "version": version,
            "created_at": now,
        }


def get_cache_stats() -> dict:
    with _lock:
        total = _hits + _misses
        namespaces: dict[str, int] = {}
        for key in _cache:
            ns = key.split(":", 1)[0]
            namespaces[ns] = namespaces.get(ns, 0) + 1
        return {
            "size": len(_cache),
            "namespaces": namespaces,
            "hits": _hits,
            "misses": _misses,
            "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
        }


def clear_cache() -> None:
    global _hits, _misses
    with _lock:
        _cache.clear()
        _hits = 0
        _misses = 0
