# services/answers.py
"""Answer writes: create, admin edit/delete, and exclusive acceptance."""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from qaboard.errors import Blocked, ConflictOrInternal, NotFound, ValidationError
from qaboard.models import Answer, Question, UserRole
from qaboard.services import policy
from qaboard.services.policy import Identity
from qaboard.services.questions import get_question_row

logger = logging.getLogger(__name__)


def answer_query():
    return (
        select(Answer)
        .options(selectinload(Answer.user))
        .execution_options(populate_existing=True)
    )


async def load_answer(db: AsyncSession, answer_id: int) -> Answer:
    answer = (await db.execute(answer_query().where(Answer.id == answer_id))).scalars().first()
    if not answer:
        raise NotFound("Answer not found")
    return answer


def _clean_content(content: Optional[str]) -> str:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Please add answer content", fields=["content"])
    return content


async def create_answer(db: AsyncSession, identity: Identity, question_id: int, *, content: Optional[str]) -> Answer:
    content = _clean_content(content)
    question = await get_question_row(db, question_id)
    if not policy.can_answer_question(identity, question):
        raise Blocked()

    answer = Answer(content=content, question_id=question.id, user_id=identity.id)
    db.add(answer)
    await db.commit()
    logger.info("User %s answered question %s (answer %s)", identity.id, question.id, answer.id)
    return await load_answer(db, answer.id)


async def update_answer(db: AsyncSession, identity: Identity, answer_id: int, changes: dict) -> Answer:
    policy.require_role(identity, UserRole.admin)
    answer = await load_answer(db, answer_id)

    unknown = sorted(set(changes) - {"content"})
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(unknown)}", fields=unknown)
    if "content" in changes:
        answer.content = _clean_content(changes["content"])

    await db.commit()
    return await load_answer(db, answer.id)


async def delete_answer(db: AsyncSession, identity: Identity, answer_id: int) -> None:
    """Detach the answer from its question, then delete it. No other answer is promoted."""
    policy.require_role(identity, UserRole.admin)
    answer = await db.get(Answer, answer_id)
    if not answer:
        raise NotFound("Answer not found")

    try:
        question = (
            await db.execute(
                select(Question)
                .options(selectinload(Question.answers))
                .where(Question.id == answer.question_id)
                .execution_options(populate_existing=True)
            )
        ).scalars().first()
        if question is not None and answer in question.answers:
            question.answers.remove(answer)
        await db.delete(answer)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Deleting answer %s failed", answer_id)
        raise ConflictOrInternal("Failed to delete answer") from exc
    logger.info("Admin %s deleted answer %s", identity.id, answer_id)


async def accept_answer(db: AsyncSession, identity: Identity, answer_id: int) -> Answer:
    """Mark one answer accepted and clear every sibling, in one transaction."""
    answer = await db.get(Answer, answer_id)
    if not answer:
        raise NotFound("Answer not found")
    # Lock the question row so concurrent accepts on it serialise.
    question = await get_question_row(db, answer.question_id, for_update=True)
    policy.ensure_can_accept_answer(identity, question)

    try:
        await db.execute(
            update(Answer)
            .where(
                Answer.question_id == question.id,
                Answer.id != answer.id,
                Answer.is_accepted.is_(True),
            )
            .values(is_accepted=False)
        )
        await db.execute(
            update(Answer).where(Answer.id == answer.id).values(is_accepted=True)
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Accepting answer %s failed", answer_id)
        raise ConflictOrInternal("Failed to accept answer") from exc

    logger.info("User %s accepted answer %s on question %s", identity.id, answer_id, question.id)
    return await load_answer(db, answer_id)
