"""
Request body schemas.

Bodies arrive with camelCase keys from the web client; each field declares
its wire name as an alias and snake_case is accepted too.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from filters import contains_blocked_word


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RegisterRequest(_Body):
    username: str = Field(..., min_length=3, max_length=32, pattern=r"^[A-Za-z0-9_.-]+$")
    password: str = Field(..., min_length=6, max_length=128)
    real_name: str = Field(..., alias="realName", min_length=1, max_length=100)
    fake_name: str = Field(..., alias="fakeName", min_length=1, max_length=50)
    age: int = Field(..., ge=1, le=120)
    school: str = Field(..., min_length=1, max_length=100)
    class_info: str = Field(..., alias="classInfo", min_length=1, max_length=50)
    avatar_type: Literal["animal", "fantasy"] = Field(..., alias="avatarType")
    avatar_id: str = Field(..., alias="avatarId", min_length=1, max_length=50)

    @field_validator("fake_name", "username")
    @classmethod
    def _no_blocked_words(cls, value: str) -> str:
        if contains_blocked_word(value):
            raise ValueError("contains a blocked word")
        return value


class LoginRequest(_Body):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("username")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


class SendMessageRequest(_Body):
    receiver_id: int = Field(..., alias="receiverId", gt=0)
    content: str = Field(..., min_length=1, max_length=2000)


class GuessRequest(_Body):
    target_id: int = Field(..., alias="targetId", gt=0)
    guessed_name: str = Field(..., alias="guessedName", min_length=1, max_length=100)


def field_errors(exc: ValidationError) -> list[dict]:
    """Flatten a pydantic error into [{"field": ..., "message": ...}]."""
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "body"
        errors.append({"field": field, "message": err.get("msg", "Invalid value")})
    return errors
