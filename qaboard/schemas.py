from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from fastapi_users import schemas
from typing import Optional, List
from datetime import datetime

from .models import UserRole


class CamelModel(BaseModel):
    """Serialises as camelCase (isPublic, createdAt) and accepts either case on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CamelInput(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )


class PartialUpdate(CamelInput):
    @model_validator(mode="before")
    @classmethod
    def _no_explicit_nulls(cls, data):
        # Optional on update means "may be omitted", never "may be null".
        if isinstance(data, dict):
            nulls = [k for k, v in data.items() if v is None]
            if nulls:
                raise ValueError(f"{', '.join(nulls)} may not be null")
        return data

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


# =========================
# USER SCHEMAS
# =========================
class UserRead(schemas.BaseUser[int]):
    name: str
    role: UserRole
    is_blocked: bool = False
    blocked_reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class UserCreate(schemas.BaseUserCreate):
    name: str = Field(min_length=1, max_length=100)


class UserSummary(CamelModel):
    id: int
    name: str


class UserAdminSummary(UserSummary):
    email: str


class BlockRequest(CamelInput):
    reason: Optional[str] = Field(default=None, max_length=500)


# =========================
# ANSWER SCHEMAS
# =========================
class AnswerCreate(CamelInput):
    content: str = Field(min_length=1)


class AnswerUpdate(PartialUpdate):
    content: Optional[str] = Field(default=None, min_length=1)


class AnswerRead(CamelModel):
    id: int
    content: str
    question_id: int
    user: UserSummary
    is_accepted: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =========================
# QUESTION SCHEMAS
# =========================
class QuestionCreate(CamelInput):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1)
    is_public: bool = True


class QuestionUpdate(PartialUpdate):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1)
    is_public: Optional[bool] = None


class QuestionRead(CamelModel):
    id: int
    title: str
    description: str
    is_public: bool
    user: UserSummary
    answers: List[AnswerRead] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class QuestionAdminRead(QuestionRead):
    user: UserAdminSummary


class SuccessResponse(BaseModel):
    success: bool = True
