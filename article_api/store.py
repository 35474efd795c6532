"""
Article store — persistence and entity invariants for the Article table.

Design notes
------------
- Slug uniqueness is enforced by the ``uq_articles_slug`` constraint at the
  moment of the INSERT/UPDATE.  There is no "SELECT then INSERT" pre-check,
  so two concurrent writers racing for the same slug cannot both succeed:
  the loser's flush raises ``IntegrityError``, which becomes
  ``ConflictError``.
- Every mutating function is its own transaction: it commits on success
  and rolls back on failure.  A rollback expires every ORM instance held by
  the session, so callers must re-read rather than reuse stale objects.
- ``updated_at`` only ever moves forward, even when two writes land within
  the same clock tick.
- Anything else the database raises is logged and surfaced as
  ``StorageFailure``; nothing is retried here.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator

from sqlalchemy import delete as sa_delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from article_api.config import settings
from article_api.errors import ConflictError, StorageFailure, ValidationError
from article_api.models import Article, utcnow
from article_api.schemas import ArticleChanges

logger = logging.getLogger(__name__)

_TICK = timedelta(microseconds=1)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def clamp_limit(limit: int) -> int:
    """Clamp a page size into ``[1, MAX_PAGE_SIZE]``."""
    return max(1, min(limit, settings.MAX_PAGE_SIZE))


def _is_slug_violation(exc: IntegrityError) -> bool:
    # SQLite: "UNIQUE constraint failed: articles.slug"
    # PostgreSQL: 'duplicate key value violates unique constraint "uq_articles_slug"'
    return "slug" in str(exc.orig).lower()


@asynccontextmanager
async def _read(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Article %s failed: %s", operation, exc)
        raise StorageFailure(operation) from exc


@asynccontextmanager
async def _write(
    db: AsyncSession, operation: str, slug: str | None = None
) -> AsyncIterator[None]:
    """Run the body and commit; translate database errors on the way out."""
    try:
        yield
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        if slug is not None and _is_slug_violation(exc):
            logger.warning(
                "Article %s rejected: slug %r already taken",
                operation,
                slug,
                extra={"slug": slug, "error_code": ConflictError.code},
            )
            raise ConflictError(slug) from exc
        logger.error("Article %s violated a constraint: %s", operation, exc)
        raise StorageFailure(operation) from exc
    except StaleDataError:
        await db.rollback()
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error(
            "Article %s failed: %s",
            operation,
            exc,
            extra={"error_code": StorageFailure.code},
        )
        raise StorageFailure(operation) from exc


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

async def create(
    db: AsyncSession,
    *,
    title: str,
    content: str,
    slug: str,
    excerpt: str | None = None,
    published: bool = False,
) -> Article:
    """
    Insert a new article.

    Raises ``ConflictError`` when *slug* is already held by any article.
    """
    now = utcnow()
    article = Article(
        title=title,
        content=content,
        excerpt=excerpt,
        slug=slug,
        published=published,
        created_at=now,
        updated_at=now,
    )
    async with _write(db, "create", slug=slug):
        db.add(article)
        await db.flush()

    logger.info(
        "Created article %d (%s)",
        article.id,
        slug,
        extra={"article_id": article.id, "slug": slug},
    )
    return article


async def update(
    db: AsyncSession, article_id: int, changes: ArticleChanges
) -> Article | None:
    """
    Apply *changes* to the article identified by *article_id*.

    Returns None when *changes* is empty (nothing is written and
    ``updated_at`` is left alone) or when the article does not exist.
    Raises ``ConflictError`` when the new slug belongs to another article;
    the stored row is left untouched.
    """
    values = changes.provided()
    if not values:
        return None

    article = await get_by_id(db, article_id)
    if article is None:
        return None

    try:
        async with _write(db, "update", slug=values.get("slug")):
            for field, value in values.items():
                setattr(article, field, value)
            article.updated_at = max(utcnow(), article.updated_at + _TICK)
            await db.flush()
    except StaleDataError:
        # Deleted by someone else between our SELECT and UPDATE.
        return None

    logger.info(
        "Updated article %d (%s)",
        article_id,
        ", ".join(sorted(values)),
        extra={"article_id": article_id},
    )
    return article


async def delete(db: AsyncSession, article_id: int) -> bool:
    """
    Hard-delete the article.  Returns True if a row was removed, False if
    there was nothing to remove.
    """
    async with _write(db, "delete"):
        result = await db.execute(sa_delete(Article).where(Article.id == article_id))
    deleted = result.rowcount > 0
    if deleted:
        logger.info("Deleted article %d", article_id, extra={"article_id": article_id})
    return deleted


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def get_by_id(db: AsyncSession, article_id: int) -> Article | None:
    async with _read("get_by_id"):
        result = await db.execute(select(Article).where(Article.id == article_id))
        return result.scalar_one_or_none()


async def get_by_slug(db: AsyncSession, slug: str) -> Article | None:
    """Exact, case-sensitive slug lookup."""
    async with _read("get_by_slug"):
        result = await db.execute(select(Article).where(Article.slug == slug))
        return result.scalar_one_or_none()


async def list_articles(
    db: AsyncSession,
    published: bool | None = None,
    limit: int = settings.DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> list[Article]:
    """
    Return articles newest first (``created_at`` desc, then ``id`` desc so
    the order is total).  *limit* is clamped to ``[1, MAX_PAGE_SIZE]``.
    """
    if offset < 0:
        raise ValidationError(
            "offset must be >= 0",
            [{"field": "offset", "message": "must be >= 0", "type": "greater_than_equal"}],
        )

    q = select(Article)
    if published is not None:
        q = q.where(Article.published == published)
    q = (
        q.order_by(Article.created_at.desc(), Article.id.desc())
        .offset(offset)
        .limit(clamp_limit(limit))
    )
    async with _read("list"):
        result = await db.execute(q)
        return list(result.scalars().all())


async def list_published(
    db: AsyncSession,
    limit: int = settings.DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> list[Article]:
    return await list_articles(db, published=True, limit=limit, offset=offset)


async def count(db: AsyncSession, published: bool | None = None) -> int:
    q = select(func.count()).select_from(Article)
    if published is not None:
        q = q.where(Article.published == published)
    async with _read("count"):
        return (await db.execute(q)).scalar_one()
