"""
API error taxonomy and the FastAPI exception handlers that render it.

Every error the API reports on purpose is an ``ApiError`` subclass that
carries its own HTTP status and message.  ``register_exception_handlers``
wires them, plus FastAPI's request validation errors, Starlette HTTP
errors (unmatched routes, wrong methods), database failures and any
unexpected exception into JSON bodies of the shape
``{"statusCode": ..., "message": ...}``.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Something went wrong"


class ApiError(Exception):
    status_code: int = 500
    message: str = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"statusCode": self.status_code, "message": self.message}


# --- 400 ---

class ValidationFailedError(ApiError):
    """Field-level validation failure: ``errors`` is a list of ``{field, error}``."""

    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: list[dict]) -> None:
        super().__init__()
        self.errors = errors

    def to_dict(self) -> dict:
        return {"statusCode": self.status_code, "errors": self.errors}


class InvalidPaginationError(ApiError):
    status_code = 400
    message = "Page size and page no should be greater than or equal to 1"

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message}


class UserExistsError(ApiError):
    status_code = 400
    message = "User already exists with provided email"


class UserNotFoundError(ApiError):
    status_code = 400
    message = "User does not exist"


# --- 401 / 403 ---

class IncorrectPasswordError(ApiError):
    status_code = 401
    message = "Incorrect password"


class TokenVerificationError(ApiError):
    status_code = 401
    message = "Unauthorized"


class MissingTokenError(ApiError):
    status_code = 403
    message = "Authorization token missing"


# --- 404 ---

class ArticleNotFoundError(ApiError):
    status_code = 404
    message = "Article not found or you don't have access to it."


class ProfileNotFoundError(ApiError):
    status_code = 404
    message = "User not found"


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def _field_name(loc) -> str:
    # ("body", "email") -> "email"; ("query", "pageSize") -> "pageSize"
    names = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(names) if names else str(loc[0]) if loc else "body"


def validation_errors_to_fields(errors) -> list[dict]:
    """Convert pydantic error dicts into ``{field, error}`` entries, one per field."""
    fields: list[dict] = []
    seen: set[str] = set()
    for err in errors:
        field = _field_name(err.get("loc", ()))
        if field in seen:
            continue
        seen.add(field)
        fields.append({"field": field, "error": err.get("msg", "Invalid value")})
    return fields


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationFailedError(validation_errors_to_fields(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"statusCode": exc.status_code, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # Handled inside the middleware stack, so CORS and timing headers still apply.
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"statusCode": 500, "message": INTERNAL_ERROR_MESSAGE},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"statusCode": 500, "message": INTERNAL_ERROR_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
