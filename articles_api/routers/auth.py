from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from articles_api.config import settings
from articles_api.database import get_db
from articles_api.schemas import LoginRequest, RegisterRequest
from articles_api.security import TokenService, get_token_service
from articles_api.services import user_service

router = APIRouter(prefix=settings.API_PREFIX, tags=["auth"])


@router.post("/register")
async def register(data: RegisterRequest, db: AsyncSession = Depends(get_db)):
    await user_service.register_user(db, data)
    await db.commit()
    return {
        "statusCode": 200,
        "message": "Registered successfully! Please Login to continue",
    }


@router.post("/login")
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    user = await user_service.login(db, data, tokens)
    return {"statusCode": 200, "message": "Login Successful!", "user": user}
