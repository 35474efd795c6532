import json
import logging

import redis.asyncio as redis

from article_api.config import settings

logger = logging.getLogger(__name__)

GENERATION_KEY = "articles:generation"
LIST_PATTERN = "articles:g*:list:*"
SLUG_PATTERN = "articles:g*:slug:*"


def list_key(generation: int, published: bool | None, limit: int, offset: int) -> str:
    flag = "all" if published is None else ("published" if published else "draft")
    return f"articles:g{generation}:list:{flag}:{limit}:{offset}"


def detail_key(generation: int, article_id: int) -> str:
    return f"articles:g{generation}:detail:{article_id}"


def detail_pattern(article_id: int) -> str:
    return f"articles:g*:detail:{article_id}"


def slug_key(generation: int, slug: str) -> str:
    return f"articles:g{generation}:slug:{slug}"


class CacheManager:
    """
    Cache-aside manager backed by Redis.

    Every public method is safe to call when Redis is down or was never
    connected: reads miss and writes are skipped, so a request never fails
    because of the cache.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None
        self._hits: int = 0
        self._misses: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection pool.  Called once at application startup."""
        if not settings.CACHE_ENABLED:
            logger.info("Cache disabled by configuration")
            return
        self._redis = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await self._redis.ping()
            logger.info("Redis connected: %s", settings.REDIS_URL)
        except Exception as exc:  # pragma: no cover
            logger.warning("Redis ping failed, serving from the database only: %s", exc)

    async def disconnect(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def generation(self) -> int | None:
        """
        Return the current write generation, or None when the cache cannot
        be used.  Readers must fetch it *before* touching the database: a
        write that commits afterwards bumps the generation, so whatever the
        reader stores lands under a key nobody asks for again.
        """
        if not self._redis:
            return None
        try:
            value = await self._redis.get(GENERATION_KEY)
        except Exception as exc:
            logger.debug("Cache generation read error: %s", exc)
            return None
        return int(value) if value is not None else 0

    async def get(self, key: str) -> dict | list | None:
        """Return the cached value for *key*, or None on a miss or error."""
        if not self._redis:
            self._misses += 1
            return None
        try:
            data = await self._redis.get(key)
        except Exception as exc:
            logger.debug("Cache GET error for key=%r: %s", key, exc)
            self._misses += 1
            return None
        if data is None:
            self._misses += 1
            return None
        self._hits += 1
        return json.loads(data)

    async def set(self, key: str, value: dict | list, ttl: int | None = None) -> None:
        if not self._redis:
            return
        try:
            await self._redis.set(key, json.dumps(value, default=str), ex=ttl)
        except Exception as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)

    async def delete_pattern(self, pattern: str) -> None:
        """Delete all keys matching *pattern* using SCAN (never KEYS)."""
        if not self._redis:
            return
        try:
            keys = [key async for key in self._redis.scan_iter(match=pattern)]
            if keys:
                await self._redis.delete(*keys)
                logger.debug("Cache invalidated %d key(s) matching %r", len(keys), pattern)
        except Exception as exc:
            logger.debug("Cache DELETE_PATTERN error for pattern=%r: %s", pattern, exc)

    # ------------------------------------------------------------------
    # Article invalidation
    # ------------------------------------------------------------------

    async def invalidate_article(self, article_id: int | None = None) -> None:
        """
        Start a new write generation, then drop everything the write can
        make stale: all list pages, all slug lookups (a slug may have moved)
        and, when given, the article's detail entries.

        Bumping the generation is what keeps a reader that loaded the old
        row before this write from caching it where later reads look.
        """
        if not self._redis:
            return
        try:
            await self._redis.incr(GENERATION_KEY)
        except Exception as exc:
            logger.warning("Cache generation bump failed: %s", exc)
        await self.delete_pattern(LIST_PATTERN)
        await self.delete_pattern(SLUG_PATTERN)
        if article_id is not None:
            await self.delete_pattern(detail_pattern(article_id))

    @property
    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }


# Module-level instance shared across all request handlers.
cache = CacheManager()
