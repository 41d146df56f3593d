from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from qaboard.database import get_db
from qaboard.schemas import (
    QuestionAdminRead,
    QuestionCreate,
    QuestionRead,
    QuestionUpdate,
    SuccessResponse,
)
from qaboard.services import questions as svc
from qaboard.services.policy import Identity
from qaboard.utils import require_admin_identity, require_identity

router = APIRouter(prefix="/api/questions", tags=["questions"])


@router.get("/public", response_model=list[QuestionRead])
async def list_public_questions(db: AsyncSession = Depends(get_db)):
    return await svc.list_public_questions(db)


@router.get("/my-questions", response_model=list[QuestionRead])
async def list_my_questions(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    return await svc.list_my_questions(db, identity)


@router.get("", response_model=list[QuestionAdminRead])
async def list_all_questions(
    admin: Identity = Depends(require_admin_identity),
    db: AsyncSession = Depends(get_db),
):
    return await svc.list_all_questions(db, admin)


@router.post("", response_model=QuestionRead, status_code=status.HTTP_201_CREATED)
async def create_question(
    payload: QuestionCreate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    return await svc.create_question(
        db,
        identity,
        title=payload.title,
        description=payload.description,
        is_public=payload.is_public,
    )


@router.delete("/admin/{question_id}", response_model=SuccessResponse)
async def force_delete_question(
    question_id: int,
    admin: Identity = Depends(require_admin_identity),
    db: AsyncSession = Depends(get_db),
):
    await svc.force_delete_question(db, admin, question_id)
    return SuccessResponse()


@router.get("/{question_id}", response_model=QuestionRead)
async def get_question(
    question_id: int,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    return await svc.get_question(db, identity, question_id)


@router.put("/{question_id}", response_model=QuestionRead)
async def update_question(
    question_id: int,
    payload: QuestionUpdate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    return await svc.update_question(db, identity, question_id, payload.changes())


@router.delete("/{question_id}", response_model=SuccessResponse)
async def delete_question(
    question_id: int,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    await svc.delete_question(db, identity, question_id)
    return SuccessResponse()


__all__ = ["router"]
