"""
Article service — business logic for the Article aggregate.

Design notes
------------
- The public reads (listing and detail) go through the cache-aside
  pattern (Redis, falling back to the DB).  Invalidation is the caller's
  job and happens after the transaction commits; see the article router.
- Listing order is creation time ascending, ties broken by id, so pages
  are stable while new articles are appended.
- Update and delete carry the ownership filter in the statement itself
  (``WHERE id = :id AND user_id = :uid``).  A zero row count means the
  article does not exist or belongs to someone else; there is no
  separate existence query to race against.
- Service functions flush but do not commit; the write handlers commit
  before they respond.
"""
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from articles_api.cache import cache
from articles_api.models import Article


def _article_to_dict(article: Article) -> dict:
    return {
        "id": article.id,
        "content": article.content,
        "userId": article.user_id,
        "createdAt": article.created_at.isoformat() if article.created_at else None,
    }


async def get_articles(db: AsyncSession, page_no: int = 1, page_size: int = 20) -> list[dict]:
    """Return one page of articles in creation order."""

    async def load() -> list[dict]:
        q = (
            select(Article)
            .order_by(Article.created_at.asc(), Article.id.asc())
            .offset((page_no - 1) * page_size)
            .limit(page_size)
        )
        result = await db.execute(q)
        return [_article_to_dict(a) for a in result.scalars().all()]

    return await cache.articles_page(page_no, page_size, load)


async def get_article(db: AsyncSession, article_id: int) -> dict | None:
    """Return the article dict for *article_id*, or None when it does not exist."""

    async def load() -> dict | None:
        result = await db.execute(select(Article).where(Article.id == article_id))
        article = result.scalar_one_or_none()
        return _article_to_dict(article) if article is not None else None

    return await cache.article(article_id, load)


async def create_article(db: AsyncSession, user_id: int, content: str) -> dict:
    """Insert an article owned by *user_id*; *content* is stored trimmed."""
    article = Article(content=content.strip(), user_id=user_id)
    db.add(article)
    await db.flush()
    # created_at is a server default; load it back before serialising.
    await db.refresh(article)
    return _article_to_dict(article)


async def update_article(db: AsyncSession, article_id: int, user_id: int, content: str) -> bool:
    """
    Replace the content of *article_id* if it is owned by *user_id*.

    Returns False when no such article exists for that owner.
    """
    result = await db.execute(
        update(Article)
        .where(Article.id == article_id, Article.user_id == user_id)
        .values(content=content.strip())
    )
    return result.rowcount > 0


async def delete_article(db: AsyncSession, article_id: int, user_id: int) -> bool:
    """
    Delete *article_id* if it is owned by *user_id*.

    Returns False when no such article exists for that owner.
    """
    result = await db.execute(
        delete(Article)
        .where(Article.id == article_id, Article.user_id == user_id)
    )
    return result.rowcount > 0
