"""Cached public pages and their invalidation after mutations.

Each logical page (``/posts/``, ``/posts/slug/<slug>/``) owns a generation
token in the cache. Cached payloads are keyed by path, generation and a
variant (usually the query string), so revalidating a path retires every
variant at once. Revalidation is fire-and-forget: a cache failure is logged
and never reaches the caller.
"""

import logging
import uuid
from typing import Any, Callable

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

KEY_PREFIX = "page"


def _generation_key(path: str) -> str:
    return f"{KEY_PREFIX}:gen:{path}"


def _generation(path: str) -> str:
    token = cache.get(_generation_key(path))
    if token is None:
        token = uuid.uuid4().hex
        cache.set(_generation_key(path), token, None)
    return token


def cached_page(path: str, variant: str, build: Callable[[], Any]) -> Any:
    """Return the cached payload for ``path``/``variant`` or build and store it."""
    try:
        key = f"{KEY_PREFIX}:{path}:{_generation(path)}:{variant}"
        payload = cache.get(key)
    except Exception:  # pragma: no cover - cache backend outage
        logger.warning("Page cache unavailable for %s; rendering uncached", path, exc_info=True)
        return build()

    if payload is None:
        payload = build()
        try:
            cache.set(key, payload, settings.PAGE_CACHE_TIMEOUT)
        except Exception:  # pragma: no cover - cache backend outage
            logger.warning("Could not store page cache for %s", path, exc_info=True)
    return payload


def revalidate_path(path: str) -> None:
    """Retire every cached variant of ``path`` so the next request rebuilds it."""
    try:
        cache.set(_generation_key(path), uuid.uuid4().hex, None)
    except Exception:  # pragma: no cover - cache backend outage
        logger.warning("Revalidation of %s failed", path, exc_info=True)
        return
    logger.debug("Revalidated %s", path)


__all__ = ["cached_page", "revalidate_path"]
