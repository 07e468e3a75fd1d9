from fastapi import Depends, Header, Query

from articles_api.config import settings
from articles_api.errors import InvalidPaginationError, MissingTokenError, TokenVerificationError
from articles_api.security import Identity, TokenService, get_token_service

BEARER_PREFIX = "Bearer "


class PaginationParams:
    """
    Reusable FastAPI dependency that parses the public listing's
    pagination query parameters.

    Attributes
    ----------
    page_no:
        1-based page number (``pageNo``).
    page_size:
        Number of items per page (``pageSize``), clamped to
        ``settings.MAX_PAGE_SIZE``.
    offset:
        Computed SQL OFFSET derived from *page_no* and *page_size*.

    Values below 1 raise ``InvalidPaginationError`` rather than a field
    error list, so callers get ``{"success": false, "message": ...}``.
    """

    def __init__(
        self,
        page_no: int = Query(1, alias="pageNo", description="Page number (1-based)."),
        page_size: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            alias="pageSize",
            description=f"Items per page (max {settings.MAX_PAGE_SIZE}).",
        ),
    ) -> None:
        if page_no < 1 or page_size < 1:
            raise InvalidPaginationError()
        self.page_no = page_no
        self.page_size = min(page_size, settings.MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page_no - 1) * self.page_size


async def get_current_user(
    authorization: str | None = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> Identity:
    """
    Resolve the acting user from ``Authorization: Bearer <token>``.

    No header -> 403.  Anything that does not verify -> 401.
    """
    if not authorization:
        raise MissingTokenError()
    if not authorization.startswith(BEARER_PREFIX):
        raise TokenVerificationError()
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise TokenVerificationError()
    return tokens.verify(token)
