from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey, Text, DateTime, func, Index
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship
import sqlalchemy as sa
from .database import Base
import enum


class UserRole(str, enum.Enum):
    member = "member"
    admin = "admin"


# ---------------------------
# USER MODEL
# ---------------------------
class User(Base):
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(320), unique=True, index=True, nullable=False)
    hashed_password = Column(String(1024), nullable=False)
    role = Column(SAEnum(UserRole, name="user_role"), default=UserRole.member, nullable=False)
    is_blocked = Column(Boolean, default=False, nullable=False)
    blocked_reason = Column(Text, nullable=True)
    # fastapi-users bookkeeping
    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    questions = relationship("Question", back_populates="user")
    answers = relationship("Answer", back_populates="user")

    @property
    def is_superuser(self) -> bool:
        # role is the source of truth; fastapi-users only reads this flag
        return self.role == UserRole.admin

    def __repr__(self):
        return f"<User {self.email}>"


# ---------------------------
# QUESTIONS
# ---------------------------
class Question(Base):
    __tablename__ = "question"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    is_public = Column(Boolean, default=True, nullable=False)
    user_id = Column(Integer, ForeignKey("user.id"), index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="questions")
    # Derived from Answer.question_id; the FK is the single source of truth.
    answers = relationship(
        "Answer",
        back_populates="question",
        order_by="Answer.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


# ---------------------------
# ANSWERS
# ---------------------------
class Answer(Base):
    __tablename__ = "answer"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    question_id = Column(Integer, ForeignKey("question.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("user.id"), index=True, nullable=False)
    is_accepted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    question = relationship("Question", back_populates="answers")
    user = relationship("User", back_populates="answers")


# At most one accepted answer per question, enforced by the store.
Index(
    "uq_answer_one_accepted_per_question",
    Answer.question_id,
    unique=True,
    postgresql_where=Answer.is_accepted == sa.true(),
    sqlite_where=Answer.is_accepted == sa.true(),
)
