"""
Redis cache for the two public article reads: listing pages and single
articles.

Listing pages are stored under a generation number.  Any article write
bumps the generation, which orphans every cached page at once (they age
out through ``CACHE_TTL_LIST``) without scanning the keyspace.  A reader
keeps the generation it looked up, so a page loaded from the database is
never filed under a generation that a later write has already started.

Detail entries are keyed by article id and deleted on update/delete.

Every method degrades to "load from the database" when Redis is disabled
or failing; a cache problem never fails a request.
"""
import json
import logging
from collections.abc import Awaitable, Callable

import redis.asyncio as redis
from redis.exceptions import RedisError

from articles_api.config import settings

logger = logging.getLogger(__name__)

LIST_GENERATION_KEY = "articles:list:generation"


def list_key(generation: int, page_no: int, page_size: int) -> str:
    return f"articles:list:{generation}:{page_no}:{page_size}"


def detail_key(article_id: int) -> str:
    return f"articles:detail:{article_id}"


class ArticleCache:
    def __init__(self) -> None:
        self._redis: redis.Redis | None = None

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    async def connect(self) -> None:
        """Open the connection pool.  Called once at application startup."""
        if not settings.CACHE_ENABLED:
            logger.info("Cache disabled by configuration")
            return
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await client.ping()
        except RedisError as exc:  # pragma: no cover
            logger.warning("Redis ping failed, cache disabled: %s", exc)
            await client.aclose()
            return
        self._redis = client
        logger.info("Redis connected: %s", settings.REDIS_URL)

    async def disconnect(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    # --- read paths ---

    async def articles_page(
        self,
        page_no: int,
        page_size: int,
        load: Callable[[], Awaitable[list[dict]]],
    ) -> list[dict]:
        """Return one listing page from the cache, calling *load* on a miss."""
        if not self._redis:
            return await load()
        try:
            generation = int(await self._redis.get(LIST_GENERATION_KEY) or 0)
        except (RedisError, ValueError) as exc:
            logger.debug("Cache generation read failed: %s", exc)
            return await load()

        key = list_key(generation, page_no, page_size)
        cached = await self._read(key)
        if cached is not None:
            return cached
        articles = await load()
        await self._write(key, articles, settings.CACHE_TTL_LIST)
        return articles

    async def article(
        self,
        article_id: int,
        load: Callable[[], Awaitable[dict | None]],
    ) -> dict | None:
        """Return one article from the cache, calling *load* on a miss.  Unknown ids are not stored."""
        if not self._redis:
            return await load()
        key = detail_key(article_id)
        cached = await self._read(key)
        if cached is not None:
            return cached
        data = await load()
        if data is not None:
            await self._write(key, data, settings.CACHE_TTL_DETAIL)
        return data

    # --- write path ---

    async def invalidate_article(self, article_id: int | None = None) -> None:
        """
        Retire every cached listing page and, when *article_id* is given,
        that article's detail entry.  Call only after the write committed.
        """
        if not self._redis:
            return
        try:
            await self._redis.incr(LIST_GENERATION_KEY)
            if article_id is not None:
                await self._redis.delete(detail_key(article_id))
        except RedisError as exc:
            logger.warning("Cache invalidation failed for article=%s: %s", article_id, exc)

    async def _read(self, key: str):
        try:
            data = await self._redis.get(key)
            return json.loads(data) if data is not None else None
        except (RedisError, ValueError) as exc:
            logger.debug("Cache GET error for key=%r: %s", key, exc)
            return None

    async def _write(self, key: str, value, ttl: int) -> None:
        try:
            await self._redis.set(key, json.dumps(value), ex=ttl)
        except RedisError as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)


# Module-level singleton shared across all request handlers.
cache = ArticleCache()
