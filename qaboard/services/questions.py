# services/questions.py
"""Question reads, writes and the question -> answers cascade."""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from qaboard.errors import ConflictOrInternal, NotFound, ValidationError
from qaboard.models import Answer, Question, UserRole
from qaboard.services import policy
from qaboard.services.policy import Identity

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 100
EDITABLE_FIELDS = {"title", "description", "is_public"}


def question_query():
    """Question joined with its owner, answers and answer authors."""
    return (
        select(Question)
        .options(
            selectinload(Question.user),
            selectinload(Question.answers).selectinload(Answer.user),
        )
        .execution_options(populate_existing=True)
    )


def _newest_first(stmt):
    return stmt.order_by(Question.created_at.desc(), Question.id.desc())


def _clean_text(value) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip() or None


def _validate_title(title: str) -> None:
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(
            f"Title cannot be more than {TITLE_MAX_LENGTH} characters", fields=["title"]
        )


async def load_question(db: AsyncSession, question_id: int) -> Question:
    question = (await db.execute(question_query().where(Question.id == question_id))).scalars().first()
    if not question:
        raise NotFound("Question not found")
    return question


async def get_question_row(db: AsyncSession, question_id: int, *, for_update: bool = False) -> Question:
    stmt = select(Question).where(Question.id == question_id).execution_options(populate_existing=True)
    if for_update:
        stmt = stmt.with_for_update()
    question = (await db.execute(stmt)).scalars().first()
    if not question:
        raise NotFound("Question not found")
    return question


# ---------------------------
# READS
# ---------------------------
async def list_public_questions(db: AsyncSession) -> list[Question]:
    stmt = _newest_first(question_query().where(Question.is_public.is_(True)))
    return list((await db.execute(stmt)).scalars().all())


async def list_all_questions(db: AsyncSession, identity: Identity) -> list[Question]:
    policy.require_role(identity, UserRole.admin)
    return list((await db.execute(_newest_first(question_query()))).scalars().all())


async def list_my_questions(db: AsyncSession, identity: Identity) -> list[Question]:
    stmt = _newest_first(question_query().where(Question.user_id == identity.id))
    return list((await db.execute(stmt)).scalars().all())


async def get_question(db: AsyncSession, identity: Optional[Identity], question_id: int) -> Question:
    question = await load_question(db, question_id)
    policy.ensure_can_view_question(identity, question)
    return question


# ---------------------------
# WRITES
# ---------------------------
async def create_question(
    db: AsyncSession,
    identity: Identity,
    *,
    title: Optional[str],
    description: Optional[str],
    is_public: bool = True,
) -> Question:
    title = _clean_text(title)
    description = _clean_text(description)
    missing = [name for name, value in (("title", title), ("description", description)) if not value]
    if missing:
        raise ValidationError("Please add title and description", fields=missing)
    _validate_title(title)

    question = Question(
        title=title,
        description=description,
        is_public=bool(is_public),
        user_id=identity.id,
    )
    db.add(question)
    await db.commit()
    logger.info("User %s created question %s", identity.id, question.id)
    return await load_question(db, question.id)


async def update_question(db: AsyncSession, identity: Identity, question_id: int, changes: dict) -> Question:
    question = await get_question_row(db, question_id)
    policy.ensure_can_edit_question(identity, question)

    unknown = sorted(set(changes) - EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(unknown)}", fields=unknown)

    for field in ("title", "description"):
        if field in changes:
            value = _clean_text(changes[field])
            if not value:
                raise ValidationError(f"{field} cannot be empty", fields=[field])
            if field == "title":
                _validate_title(value)
            setattr(question, field, value)
    if "is_public" in changes:
        question.is_public = bool(changes["is_public"])

    await db.commit()
    return await load_question(db, question.id)


async def delete_question_cascade(db: AsyncSession, question: Question) -> None:
    """Delete the question's answers, then the question, as one transaction."""
    question_id = question.id
    try:
        await db.execute(delete(Answer).where(Answer.question_id == question_id))
        await db.delete(question)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Cascade delete of question %s failed", question_id)
        raise ConflictOrInternal("Failed to delete question") from exc
    logger.info("Question %s and its answers deleted", question_id)


async def delete_question(db: AsyncSession, identity: Identity, question_id: int) -> None:
    question = await get_question_row(db, question_id, for_update=True)
    policy.ensure_can_delete_question(identity, question)
    await delete_question_cascade(db, question)


async def force_delete_question(db: AsyncSession, identity: Identity, question_id: int) -> None:
    policy.require_role(identity, UserRole.admin)
    question = await get_question_row(db, question_id, for_update=True)
    logger.info("Admin %s force-deleting question %s", identity.id, question_id)
    await delete_question_cascade(db, question)
