from typing import Any

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from articles_api.models import CONTENT_MAX_LENGTH

PASSWORD_MIN_LENGTH = 8


# --- Auth ---

class Credentials(BaseModel):
    """
    Login payload.  Every field defaults to ``None`` and is validated in
    ``mode="before"`` so that missing, wrongly typed and malformed values
    all surface as one ``{field, error}`` entry with a readable message.
    """

    email: Any = Field(None, validate_default=True)
    password: Any = Field(None, validate_default=True)

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, value: Any) -> str:
        if value is None or value == "":
            raise PydanticCustomError("email_missing", "Email address is missing")
        if not isinstance(value, str):
            raise PydanticCustomError("email_invalid", "Email address is not valid")
        try:
            validate_email(value, check_deliverability=False, test_environment=True)
        except EmailNotValidError:
            raise PydanticCustomError("email_invalid", "Email address is not valid")
        return value

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, value: Any) -> str:
        if value is None or value == "":
            raise PydanticCustomError("password_missing", "Password is missing")
        if not isinstance(value, str):
            raise PydanticCustomError("password_type", "Password must be a string")
        if len(value) < PASSWORD_MIN_LENGTH:
            raise PydanticCustomError(
                "password_too_short",
                "Password length should be at least {min_length} characters",
                {"min_length": PASSWORD_MIN_LENGTH},
            )
        return value


class RegisterRequest(Credentials):
    model_config = ConfigDict(populate_by_name=True)

    first_name: Any = Field(None, alias="firstName")
    last_name: Any = Field(None, alias="lastName")

    @field_validator("first_name", mode="before")
    @classmethod
    def check_first_name(cls, value: Any) -> str | None:
        if value is not None and not isinstance(value, str):
            raise PydanticCustomError("first_name_invalid", "Invalid first name")
        return value

    @field_validator("last_name", mode="before")
    @classmethod
    def check_last_name(cls, value: Any) -> str | None:
        if value is not None and not isinstance(value, str):
            raise PydanticCustomError("last_name_invalid", "Invalid last name")
        return value


class LoginRequest(Credentials):
    pass


# --- Article ---

class ArticleContent(BaseModel):
    """Body of create and update; ``content`` is stored trimmed."""

    content: Any = Field(None, validate_default=True)

    @field_validator("content", mode="before")
    @classmethod
    def check_content(cls, value: Any) -> str:
        if not value or not isinstance(value, str):
            raise PydanticCustomError("content_missing", "Content is missing or must be string")
        trimmed = value.strip()
        if not 1 <= len(trimmed) <= CONTENT_MAX_LENGTH:
            raise PydanticCustomError(
                "content_length",
                "Content must be up to {max_length} characters",
                {"max_length": CONTENT_MAX_LENGTH},
            )
        return trimmed
