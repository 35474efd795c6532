"""
Article service — the public operation set for the Article aggregate.

Design notes
------------
- Input is validated here, before the store is touched.  Callers may pass
  either the pydantic schema or a plain mapping; anything that does not
  validate raises ``ValidationError``.
- Ordering, pagination and slug uniqueness live in ``article_api.store``;
  this module only forwards to it and shapes the result.
- Reads go through the cache-aside pattern (Redis, then database).  Keys
  carry a write generation read before the database; every successful
  write bumps it and purges list, slug and detail keys, so a read after a
  write never sees the old row.  ``None`` is never cached.
- Results are ``ArticleRead`` models; "not found" is ``None`` (``False``
  for delete), never an exception.
"""
from __future__ import annotations

from typing import Any, Callable, Mapping, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from article_api import store
from article_api.cache import cache, detail_key, list_key, slug_key
from article_api.config import settings
from article_api.errors import ValidationError
from article_api.schemas import (
    ArticleChanges,
    ArticleCreate,
    ArticleRead,
    ArticleUpdate,
    ListArticlesParams,
    PublishedArticlesParams,
)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _parse(schema: type[SchemaT], payload: SchemaT | Mapping[str, Any] | None) -> SchemaT:
    if isinstance(payload, schema):
        return payload
    if payload is None:
        payload = {}
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


def _check_id(article_id: Any) -> int:
    if isinstance(article_id, bool) or not isinstance(article_id, int) or article_id < 1:
        raise ValidationError(
            "Invalid article id",
            [{"field": "id", "message": "must be a positive integer", "type": "int_type"}],
        )
    return article_id


def _check_slug(slug: Any) -> str:
    if not isinstance(slug, str):
        raise ValidationError(
            "Invalid slug",
            [{"field": "slug", "message": "must be a string", "type": "string_type"}],
        )
    return slug


def _to_read(article) -> ArticleRead:
    return ArticleRead.model_validate(article)


async def _lookup(key_of: Callable[[int], str]) -> tuple[str | None, Any]:
    """
    Return ``(key, cached value)`` for the current cache generation, or
    ``(None, None)`` when the cache is unavailable.  The generation is read
    here, before the database, so a row loaded before a concurrent write is
    stored under a generation that write has already retired.
    """
    generation = await cache.generation()
    if generation is None:
        return None, None
    key = key_of(generation)
    return key, await cache.get(key)


async def _remember(key: str | None, value: dict | list, ttl: int) -> None:
    if key is not None:
        await cache.set(key, value, ttl=ttl)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

async def create_article(
    db: AsyncSession, data: ArticleCreate | Mapping[str, Any]
) -> ArticleRead:
    """
    Create an article.  ``published`` defaults to False (draft).

    Raises ``ConflictError`` (carrying the slug) if the slug is taken.
    """
    payload = _parse(ArticleCreate, data)
    article = await store.create(db, **payload.model_dump())
    result = _to_read(article)
    await cache.invalidate_article()
    return result


async def update_article(
    db: AsyncSession, article_id: int, data: ArticleUpdate | Mapping[str, Any]
) -> ArticleRead | None:
    """
    Partially update an article.

    Only fields present in *data* are written; ``excerpt: None`` clears the
    excerpt.  Returns None when the article does not exist or when *data*
    carries no fields at all.
    """
    article_id = _check_id(article_id)
    payload = _parse(ArticleUpdate, data)
    article = await store.update(db, article_id, ArticleChanges.from_update(payload))
    if article is None:
        return None
    result = _to_read(article)
    await cache.invalidate_article(article_id)
    return result


async def delete_article(db: AsyncSession, article_id: int) -> bool:
    article_id = _check_id(article_id)
    deleted = await store.delete(db, article_id)
    if deleted:
        await cache.invalidate_article(article_id)
    return deleted


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

async def get_article_by_id(db: AsyncSession, article_id: int) -> ArticleRead | None:
    article_id = _check_id(article_id)
    key, cached = await _lookup(lambda generation: detail_key(generation, article_id))
    if cached is not None:
        return ArticleRead.model_validate(cached)

    article = await store.get_by_id(db, article_id)
    if article is None:
        return None
    result = _to_read(article)
    await _remember(key, result.model_dump(mode="json"), settings.CACHE_TTL_DETAIL)
    return result


async def get_article_by_slug(db: AsyncSession, slug: str) -> ArticleRead | None:
    """Exact, case-sensitive slug lookup: ``"A"`` never finds ``"a"``."""
    slug = _check_slug(slug)
    key, cached = await _lookup(lambda generation: slug_key(generation, slug))
    if cached is not None:
        return ArticleRead.model_validate(cached)

    article = await store.get_by_slug(db, slug)
    if article is None:
        return None
    result = _to_read(article)
    await _remember(key, result.model_dump(mode="json"), settings.CACHE_TTL_DETAIL)
    return result


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

async def get_articles(
    db: AsyncSession,
    published: bool | None = None,
    limit: int = settings.DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> list[ArticleRead]:
    """
    Return one page of articles, newest first, optionally filtered on
    ``published``.  *limit* must be in ``[1, 100]`` and *offset* >= 0.
    """
    params = _parse(
        ListArticlesParams, {"published": published, "limit": limit, "offset": offset}
    )
    key, cached = await _lookup(
        lambda generation: list_key(generation, params.published, params.limit, params.offset)
    )
    if cached is not None:
        return [ArticleRead.model_validate(item) for item in cached]

    articles = await store.list_articles(
        db, published=params.published, limit=params.limit, offset=params.offset
    )
    result = [_to_read(a) for a in articles]
    await _remember(key, [a.model_dump(mode="json") for a in result], settings.CACHE_TTL_LIST)
    return result


async def get_published_articles(
    db: AsyncSession,
    limit: int = settings.DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> list[ArticleRead]:
    """Public read path: one page of published articles, newest first."""
    params = _parse(PublishedArticlesParams, {"limit": limit, "offset": offset})
    key, cached = await _lookup(
        lambda generation: list_key(generation, True, params.limit, params.offset)
    )
    if cached is not None:
        return [ArticleRead.model_validate(item) for item in cached]

    articles = await store.list_published(db, limit=params.limit, offset=params.offset)
    result = [_to_read(a) for a in articles]
    await _remember(key, [a.model_dump(mode="json") for a in result], settings.CACHE_TTL_LIST)
    return result
