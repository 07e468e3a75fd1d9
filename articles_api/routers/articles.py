from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from articles_api.cache import cache
from articles_api.config import settings
from articles_api.database import get_db
from articles_api.dependencies import PaginationParams, get_current_user
from articles_api.errors import ArticleNotFoundError
from articles_api.schemas import ArticleContent
from articles_api.security import Identity
from articles_api.services import article_service

router = APIRouter(prefix=settings.API_PREFIX, tags=["articles"])


@router.get("/articles")
async def list_articles(
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.get_articles(db, pagination.page_no, pagination.page_size)


@router.get("/article/{articleId}")
async def get_article(
    article_id: int = Path(alias="articleId"),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.get_article(db, article_id)
    if article is None:
        raise ArticleNotFoundError("Article not found")
    return {"statusCode": 200, "data": article}


# Writes commit before responding; cached reads are dropped after the commit.

@router.post("/article")
async def create_article(
    data: ArticleContent,
    current_user: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.create_article(db, current_user.id, data.content)
    await db.commit()
    await cache.invalidate_article()
    return {"statusCode": 200, "data": article}


@router.put("/article/{articleId}")
async def update_article(
    data: ArticleContent,
    article_id: int = Path(alias="articleId"),
    current_user: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await article_service.update_article(db, article_id, current_user.id, data.content):
        raise ArticleNotFoundError()
    await db.commit()
    await cache.invalidate_article(article_id)
    return {"statusCode": 200, "message": "Article updated!"}


@router.delete("/article/{articleId}")
async def delete_article(
    article_id: int = Path(alias="articleId"),
    current_user: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await article_service.delete_article(db, article_id, current_user.id):
        raise ArticleNotFoundError()
    await db.commit()
    await cache.invalidate_article(article_id)
    return {"statusCode": 200, "message": "Article deleted!"}
