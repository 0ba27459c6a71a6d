"""Spec memoization for the server.

Extraction is pure, so a Spec can be reused for as long as the listing it came
from is unchanged. Entries are keyed by category plus listing id and expire
after a TTL; listings without an id are never cached.
"""

import logging
import time
from collections import OrderedDict
from typing import Callable

from .engine import tag_with_spec
from .models import Candidate, Category, Listing, Spec

logger = logging.getLogger(__name__)


def spec_cache_key(listing: Listing, category: Category) -> str | None:
    """'cpu:MLA123' or None when the listing carries no id."""
    if not listing.id:
        return None
    return f"{category.value}:{listing.id}"


class TTLCache:
    """TTL cache with least-recently-used eviction past max_size.

    Safe for single-threaded asyncio (no await between check and set).
    """

    def __init__(self, ttl: float, max_size: int = 5000, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl
        self._max_size = max_size
        self._clock = clock
        self._data: OrderedDict[str, tuple[float, Spec]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Spec | None:
        """Cached spec, or None if missing or expired. A hit refreshes recency."""
        entry = self._data.get(key)
        if entry is not None:
            stored_at, spec = entry
            if self._clock() - stored_at < self._ttl:
                self._data.move_to_end(key)
                self.hits += 1
                return spec
            del self._data[key]
        self.misses += 1
        return None

    def set(self, key: str, spec: Spec) -> None:
        self._data[key] = (self._clock(), spec)
        self._data.move_to_end(key)
        if len(self._data) > self._max_size:
            self._evict()

    def _evict(self) -> None:
        """Drop expired entries, then least recently used ones until under max_size."""
        now = self._clock()
        expired = [k for k, (stored_at, _) in self._data.items() if now - stored_at >= self._ttl]
        for k in expired:
            del self._data[k]
        while len(self._data) > self._max_size:
            self._data.popitem(last=False)

    def clear(self) -> None:
        self._data.clear()
        self.hits = self.misses = 0

    def __len__(self) -> int:
        return len(self._data)


def tag_with_cache(cache: TTLCache, listing: Listing, category: Category) -> Candidate:
    """tag_with_spec, reusing a cached Spec for listings that carry an id."""
    key = spec_cache_key(listing, category)
    if key is None:
        return tag_with_spec(listing, category)

    spec = cache.get(key)
    if spec is not None:
        logger.debug(f"Spec cache hit: {key}")
        return Candidate(listing=listing, spec=spec, category=category)

    candidate = tag_with_spec(listing, category)
    cache.set(key, candidate.spec)
    return candidate
