import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Hashable

from app.core.config import settings

logger = logging.getLogger(__name__)

CacheKey = tuple[str, tuple[tuple[str, Hashable], ...]]


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    invalidations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class ReadThroughCache:
    """
    In-process read-through cache keyed by (entity type, filter parameters).

    Every entity type has its own TTL. Mutators call `invalidate` after a
    successful commit; other processes only see changes once the TTL runs
    out.
    """

    def __init__(self, ttls: dict[str, float], default_ttl: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.ttls = dict(ttls)
        self.default_ttl = default_ttl
        self.clock = clock
        self.stats = CacheStats()
        self._entries: dict[CacheKey, CacheEntry] = {}

    @staticmethod
    def make_key(entity: str, params: dict[str, Any] | None = None) -> CacheKey:
        items = tuple(sorted(
            (name, str(value)) for name, value in (params or {}).items() if value is not None
        ))
        return entity, items

    def get(self, entity: str, params: dict[str, Any] | None = None) -> Any | None:
        key = self.make_key(entity, params)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self.clock():
            del self._entries[key]
            return None
        return entry.value

    def set(self, entity: str, value: Any, params: dict[str, Any] | None = None) -> None:
        ttl = self.ttls.get(entity, self.default_ttl)
        self._entries[self.make_key(entity, params)] = CacheEntry(value, self.clock() + ttl)

    async def get_or_load(self, entity: str, params: dict[str, Any] | None, loader: Callable[[], Awaitable[Any]]) -> Any:
        key = self.make_key(entity, params)
        entry = self._entries.get(key)
        if entry is not None and entry.expires_at > self.clock():
            self.stats.hits += 1
            return entry.value

        self.stats.misses += 1
        value = await loader()
        self.set(entity, value, params)
        return value

    def invalidate(self, entity: str, **params: Any) -> int:
        """
        Drop every cached entry of `entity` whose parameters include `params`.

        With no params the whole entity type is dropped.
        """
        wanted = set(self.make_key(entity, params)[1])
        stale = [
            key for key in self._entries
            if key[0] == entity and wanted.issubset(key[1])
        ]
        for key in stale:
            del self._entries[key]
        self.stats.invalidations += len(stale)
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached '{entity}' entries for {params}")
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
        self.stats = CacheStats()

    def __len__(self) -> int:
        return len(self._entries)


cache = ReadThroughCache(
    ttls={
        "payments": settings.CACHE_TTL_PAYMENTS,
        "members": settings.CACHE_TTL_MEMBERS,
        "groups": settings.CACHE_TTL_GROUPS,
        "slots": settings.CACHE_TTL_SLOTS,
    }
)
