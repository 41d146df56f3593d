from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from qaboard.database import get_db
from qaboard.schemas import AnswerCreate, AnswerRead, AnswerUpdate, SuccessResponse
from qaboard.services import answers as svc
from qaboard.services.policy import Identity
from qaboard.utils import require_admin_identity, require_identity

router = APIRouter(prefix="/api/answers", tags=["answers"])


@router.post("/{question_id}", response_model=AnswerRead, status_code=status.HTTP_201_CREATED)
async def create_answer(
    question_id: int,
    payload: AnswerCreate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    return await svc.create_answer(db, identity, question_id, content=payload.content)


@router.put("/{answer_id}", response_model=AnswerRead)
async def update_answer(
    answer_id: int,
    payload: AnswerUpdate,
    admin: Identity = Depends(require_admin_identity),
    db: AsyncSession = Depends(get_db),
):
    return await svc.update_answer(db, admin, answer_id, payload.changes())


@router.delete("/{answer_id}", response_model=SuccessResponse)
async def delete_answer(
    answer_id: int,
    admin: Identity = Depends(require_admin_identity),
    db: AsyncSession = Depends(get_db),
):
    await svc.delete_answer(db, admin, answer_id)
    return SuccessResponse()


@router.patch("/{answer_id}/accept", response_model=AnswerRead)
async def accept_answer(
    answer_id: int,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    return await svc.accept_answer(db, identity, answer_id)


__all__ = ["router"]
