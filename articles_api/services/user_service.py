"""
User service — registration, credential checks and profile reads.

Emails are matched exactly as supplied (case-sensitive).  Passwords are
only ever handled as bcrypt hashes once they leave this module; hashing
and verification run in the threadpool so they never block the loop.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from articles_api.errors import IncorrectPasswordError, UserExistsError, UserNotFoundError
from articles_api.models import User
from articles_api.schemas import LoginRequest, RegisterRequest
from articles_api.security import (
    Identity,
    TokenService,
    hash_password_async,
    verify_password_async,
)

logger = logging.getLogger(__name__)


def _profile_to_dict(user: User) -> dict:
    return {
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
    }


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, data: RegisterRequest) -> User:
    """
    Create a user from a validated registration payload.

    Raises ``UserExistsError`` when the email is taken, including the case
    where a concurrent registration wins the unique constraint.
    """
    if await get_user_by_email(db, data.email) is not None:
        logger.info("Registration rejected, email already in use")
        raise UserExistsError()

    user = User(
        email=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
        password=await hash_password_async(data.password),
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        raise UserExistsError()

    logger.info("Registered user id=%s", user.id)
    return user


async def login(db: AsyncSession, data: LoginRequest, tokens: TokenService) -> dict:
    """
    Check credentials and issue a bearer token.

    Raises ``UserNotFoundError`` for an unknown email and
    ``IncorrectPasswordError`` when the password does not match.
    """
    user = await get_user_by_email(db, data.email)
    if user is None:
        raise UserNotFoundError()

    if not await verify_password_async(data.password, user.password):
        logger.warning("Failed login for user id=%s", user.id)
        raise IncorrectPasswordError()

    issued_at = datetime.now(timezone.utc)
    access_token = tokens.issue(Identity(id=user.id, email=user.email), issued_at=issued_at)
    logger.info("User id=%s logged in", user.id)
    return {
        "email": user.email,
        "id": user.id,
        "accessToken": access_token,
        "issuedAt": issued_at.isoformat(),
    }


async def get_profile(db: AsyncSession, user_id: int) -> dict | None:
    """Return the public profile of *user_id*, or None when the row is gone."""
    user = await db.get(User, user_id)
    if user is None:
        return None
    return _profile_to_dict(user)
