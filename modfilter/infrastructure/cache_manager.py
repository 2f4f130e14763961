#!/usr/bin/env python3
"""LRU cache for compiled glob patterns.

The same glob text tends to recur across many module descriptors, so the
glob compiler keeps its compiled regular expressions here:
- LRU eviction bounded by entry count
- Thread-safe operations
- Hit/miss/eviction statistics

Example:
    >>> cache = PatternCache(CacheConfig(max_entries=256))
    >>> pattern = cache.get_or_compute("foo/**", lambda: re.compile("foo/+.*"))
"""

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from modfilter.core.constants import ConfigKey, Limits


@dataclass
class CacheConfig:
    """Configuration for the pattern cache."""

    max_entries: int = Limits.DEFAULT_PATTERN_CACHE_SIZE
    enabled: bool = True

    def validate(self) -> None:
        """Validate cache configuration."""
        if self.max_entries <= 0:
            raise ValueError(f"max_entries must be positive: {self.max_entries}")

    @classmethod
    def from_section(cls, section: Dict[str, Any]) -> "CacheConfig":
        """Build from the ``modfilter.cache`` configuration section."""
        return cls(
            max_entries=section.get(ConfigKey.CACHE_MAX_PATTERNS, Limits.DEFAULT_PATTERN_CACHE_SIZE),
            enabled=section.get(ConfigKey.CACHE_ENABLED, True),
        )


class PatternCache:
    """Thread-safe LRU cache keyed by glob source text."""

    def __init__(self, config: Optional[CacheConfig] = None):
        """Initialize cache.

        Args:
            config: Cache configuration (default: CacheConfig())
        """
        self.config = config or CacheConfig()
        self.config.validate()
        self._entries: "OrderedDict[str, Any]" = OrderedDict()
        self._lock = threading.RLock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: str) -> Optional[Any]:
        """Get a cached value, marking it most recently used.

        Returns:
            Cached value or None if absent or the cache is disabled
        """
        with self._lock:
            if not self.config.enabled or key not in self._entries:
                self._misses += 1
                return None

            self._entries.move_to_end(key)
            self._hits += 1
            return self._entries[key]

    def set(self, key: str, value: Any) -> None:
        """Store a value, evicting the least recently used entries if full."""
        if not self.config.enabled:
            return

        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                self._entries[key] = value
                return

            while len(self._entries) >= self.config.max_entries:
                self._entries.popitem(last=False)
                self._evictions += 1

            self._entries[key] = value

    def get_or_compute(self, key: str, factory: Callable[[], Any]) -> Any:
        """Return the cached value for key, computing and storing it on a miss.

        Args:
            key: Cache key
            factory: Called without arguments to produce a missing value

        Returns:
            Cached or freshly computed value
        """
        with self._lock:
            value = self.get(key)
            if value is None:
                value = factory()
                self.set(key, value)
            return value

    def invalidate(self, key: str) -> bool:
        """Remove one entry.

        Returns:
            True if entry was removed
        """
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all entries and statistics."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with entries, hits, misses, evictions and hit_rate
        """
        with self._lock:
            total = self._hits + self._misses
            return {
                "entries": len(self._entries),
                "max_entries": self.config.max_entries,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": self._hits / total if total else 0.0,
            }

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_global_cache: Optional[PatternCache] = None
_global_cache_lock = threading.Lock()


def get_pattern_cache() -> PatternCache:
    """Get or create the global pattern cache."""
    global _global_cache
    with _global_cache_lock:
        if _global_cache is None:
            _global_cache = PatternCache()
        return _global_cache


def set_global_cache(cache: Optional[PatternCache]) -> None:
    """Set (or reset with None) the global pattern cache."""
    global _global_cache
    with _global_cache_lock:
        _global_cache = cache
