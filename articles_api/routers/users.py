from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from articles_api.config import settings
from articles_api.database import get_db
from articles_api.dependencies import get_current_user
from articles_api.errors import ProfileNotFoundError
from articles_api.security import Identity
from articles_api.services import user_service

router = APIRouter(prefix=settings.API_PREFIX, tags=["users"])


@router.get("/get-profile")
async def get_profile(
    current_user: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await user_service.get_profile(db, current_user.id)
    if profile is None:
        raise ProfileNotFoundError()
    return profile
