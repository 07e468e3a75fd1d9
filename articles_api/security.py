"""
Password hashing and bearer-token handling.

Passwords are hashed with bcrypt (salted, configurable cost).  Tokens are
JWTs signed with the server secret; ``TokenService`` is the only place
that knows about the signing scheme, so handlers and the auth dependency
deal exclusively in ``Identity`` objects.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
import jwt
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ValidationError

from articles_api.config import settings
from articles_api.errors import TokenVerificationError

# bcrypt only looks at the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


class Identity(BaseModel):
    """The acting user as carried inside a bearer token."""

    id: int
    email: str


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------

def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int | None = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("ascii")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("ascii"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


async def hash_password_async(password: str) -> str:
    return await run_in_threadpool(hash_password, password)


async def verify_password_async(plain_password: str, hashed_password: str) -> bool:
    return await run_in_threadpool(verify_password, plain_password, hashed_password)


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

class TokenService:
    """Issue and verify signed bearer tokens for an ``Identity``."""

    def __init__(
        self,
        secret: str | None = None,
        algorithm: str | None = None,
        lifetime: timedelta | None = None,
    ) -> None:
        self.secret = secret or settings.SECRET_KEY
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.lifetime = lifetime or timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)

    def issue(self, identity: Identity, issued_at: datetime | None = None) -> str:
        now = issued_at or datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": str(identity.id),
            "email": identity.email,
            "iat": int(now.timestamp()),
            "exp": int((now + self.lifetime).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        """
        Return the identity embedded in *token*.

        Raises ``TokenVerificationError`` for a bad signature, an expired
        token, a malformed token or a payload without a usable identity.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
            return Identity(id=int(payload["sub"]), email=payload["email"])
        except (jwt.InvalidTokenError, KeyError, ValueError, ValidationError):
            raise TokenVerificationError()


def get_token_service() -> TokenService:
    """FastAPI dependency; overridable in tests."""
    return TokenService()
