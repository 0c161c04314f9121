"""
Cache layer for position history views.

Wraps Django's cache framework with invalidate-by-prefix support that works
on any backend (locmem, memcached, redis). Every cache key is a tuple of
parts; each leading run of parts is a prefix with its own generation
counter stored in the cache. Reading a key folds the generations of all its
prefixes into the stored key, so bumping one prefix's generation makes every
key under it unreachable at once.

Mutations never touch the cache directly. Transitions return the prefixes
they affected (see ``invalidation_prefixes``) and the outer service applies
them after the transaction commits.
"""

from collections.abc import Callable, Iterable
from typing import Any

from django.conf import settings
from django.core.cache import caches
from loguru import logger

GENERATION_KEY_PREFIX = "seatpulse:gen:"

KeyParts = tuple[str, ...]


# ============================================================================
# Key builders
# ============================================================================


def politician_history_key(politician_id: Any) -> KeyParts:
    return ("position_history", "politician", str(politician_id))


def record_key(history_id: Any) -> KeyParts:
    return ("position_history", "id", str(history_id))


def current_holder_key(position_id: Any, jurisdiction: Any) -> KeyParts:
    return (
        "position_holder",
        "position",
        str(position_id),
        "jurisdiction",
        jurisdiction.cache_key(),
    )


def position_holders_key(position_id: Any) -> KeyParts:
    return ("position_holders", "position", str(position_id))


def join_key(parts: Iterable[str]) -> str:
    return ":".join(parts)


def invalidation_prefixes(
    politician_ids: Iterable[Any] = (),
    position_ids: Iterable[Any] = (),
    history_ids: Iterable[Any] = (),
) -> list[str]:
    """
    Prefixes to invalidate after seats held by these politicians changed.

    Args:
        politician_ids: Politicians whose tenures were created or closed
        position_ids: Positions whose seats changed
        history_ids: Individual records that were modified or deleted

    Returns:
        Ordered, de-duplicated list of cache prefixes.
    """
    prefixes: list[str] = []
    for politician_id in politician_ids:
        prefixes.append(join_key(politician_history_key(politician_id)))
        prefixes.append(join_key(("politician", str(politician_id))))
    for position_id in position_ids:
        prefixes.append(join_key(("position_holder", "position", str(position_id))))
        prefixes.append(join_key(position_holders_key(position_id)))
    for history_id in history_ids:
        prefixes.append(join_key(record_key(history_id)))
    return list(dict.fromkeys(prefixes))


# ============================================================================
# Prefix-invalidating cache
# ============================================================================


class PositionCache:
    """
    Best-effort read-through cache with prefix invalidation.

    Cache failures are logged and never propagate: the relational store is
    the source of truth and a cache outage must not block a mutation.

    Example:
        >>> cache = PositionCache()
        >>> cache.get_or_set(record_key(history.id), lambda: history)
        >>> cache.invalidate(["position_history:id"])
        >>> cache.get(record_key(history.id)) is None
        True
    """

    def __init__(self, alias: str = "default", ttl: int | None = None) -> None:
        self.alias = alias
        self.ttl = ttl if ttl is not None else settings.SEATPULSE_CACHE_TTL

    @property
    def backend(self):
        return caches[self.alias]

    def _generation_keys(self, parts: KeyParts) -> list[str]:
        return [
            GENERATION_KEY_PREFIX + join_key(parts[:depth])
            for depth in range(1, len(parts) + 1)
        ]

    def versioned_key(self, parts: KeyParts) -> str:
        """Physical cache key for ``parts`` under the current generations."""
        generation_keys = self._generation_keys(parts)
        generations = self.backend.get_many(generation_keys)
        version = ".".join(str(generations.get(key, 0)) for key in generation_keys)
        return f"{join_key(parts)}@{version}"

    def get(self, parts: KeyParts) -> Any:
        try:
            value = self.backend.get(self.versioned_key(parts))
        except Exception as e:
            logger.warning(f"Cache read failed for {join_key(parts)}: {e}")
            return None
        outcome = "hit" if value is not None else "miss"
        logger.debug(f"Cache {outcome}: {join_key(parts)}")
        return value

    def set(self, parts: KeyParts, value: Any) -> None:
        if value is None:
            return
        try:
            self._store(self.versioned_key(parts), parts, value)
        except Exception as e:
            logger.warning(f"Cache write failed for {join_key(parts)}: {e}")

    def get_or_set(self, parts: KeyParts, loader: Callable[[], Any]) -> Any:
        """
        Read-through lookup for ``parts``.

        The physical key is resolved once, before ``loader`` runs, and the
        loaded value is written under that same key. A writer that
        invalidates while ``loader`` is reading the store therefore leaves
        the loaded value unreachable instead of serving it.

        Args:
            parts: Logical cache key
            loader: Reads the value from the store on a miss

        Returns:
            The cached or freshly loaded value. ``None`` is returned but
            never cached.
        """
        try:
            key = self.versioned_key(parts)
            value = self.backend.get(key)
        except Exception as e:
            logger.warning(f"Cache read failed for {join_key(parts)}: {e}")
            return loader()

        if value is not None:
            logger.debug(f"Cache hit: {join_key(parts)}")
            return value

        logger.debug(f"Cache miss: {join_key(parts)}")
        value = loader()
        if value is not None:
            try:
                self._store(key, parts, value)
            except Exception as e:
                logger.warning(f"Cache write failed for {join_key(parts)}: {e}")
        return value

    def _store(self, key: str, parts: KeyParts, value: Any) -> None:
        self.backend.set(key, value, self.ttl)
        logger.debug(f"Cache set: {join_key(parts)}")

    def invalidate_prefix(self, prefix: str) -> None:
        """Make every key whose parts start with ``prefix`` unreachable."""
        generation_key = GENERATION_KEY_PREFIX + prefix
        try:
            # Generation counters never expire
            if self.backend.add(generation_key, 1, None):
                return
            try:
                self.backend.incr(generation_key)
            except ValueError:
                # Evicted between add() and incr()
                self.backend.set(generation_key, 1, None)
        except Exception as e:
            logger.warning(f"Cache invalidation failed for {prefix}: {e}")

    def invalidate(self, prefixes: Iterable[str]) -> None:
        prefixes = list(dict.fromkeys(prefixes))
        for prefix in prefixes:
            self.invalidate_prefix(prefix)
        if prefixes:
            logger.debug(f"Invalidated {len(prefixes)} cache prefixes")
