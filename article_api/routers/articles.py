from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from article_api.database import get_db
from article_api.dependencies import PaginationParams
from article_api.schemas import ArticleCreate, ArticleRead, ArticleUpdate
from article_api.services import article_service

router = APIRouter(prefix="/api/v1/articles", tags=["articles"])

# "Not found" is a 200 with a null body (false for delete); errors use the
# ArticleError envelope, so the two can never be confused by a client.

@router.get("", response_model=list[ArticleRead])
async def get_articles(
    published: bool | None = Query(None, description="Only drafts (false) or only published (true)."),
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.get_articles(
        db, published=published, limit=pagination.limit, offset=pagination.offset
    )

@router.get("/published", response_model=list[ArticleRead])
async def get_published_articles(
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.get_published_articles(
        db, limit=pagination.limit, offset=pagination.offset
    )

@router.get("/slug/{slug}", response_model=ArticleRead | None)
async def get_article_by_slug(slug: str, db: AsyncSession = Depends(get_db)):
    return await article_service.get_article_by_slug(db, slug)

@router.get("/{article_id}", response_model=ArticleRead | None)
async def get_article_by_id(article_id: int, db: AsyncSession = Depends(get_db)):
    return await article_service.get_article_by_id(db, article_id)

@router.post("", status_code=201, response_model=ArticleRead)
async def create_article(data: ArticleCreate, db: AsyncSession = Depends(get_db)):
    return await article_service.create_article(db, data)

@router.patch("/{article_id}", response_model=ArticleRead | None)
async def update_article(article_id: int, data: ArticleUpdate, db: AsyncSession = Depends(get_db)):
    return await article_service.update_article(db, article_id, data)

@router.delete("/{article_id}", response_model=bool)
async def delete_article(article_id: int, db: AsyncSession = Depends(get_db)):
    return await article_service.delete_article(db, article_id)
