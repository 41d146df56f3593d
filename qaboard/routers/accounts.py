from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qaboard.database import get_db
from qaboard.models import User
from qaboard.schemas import BlockRequest, UserRead
from qaboard.services import accounts as svc
from qaboard.services.policy import Identity
from qaboard.utils import require_admin_identity, require_authenticated_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/me", response_model=UserRead)
async def read_me(user: User = Depends(require_authenticated_user)):
    return user


@router.get("/users", response_model=list[UserRead])
async def list_users(
    admin: Identity = Depends(require_admin_identity),
    db: AsyncSession = Depends(get_db),
):
    return await svc.list_users(db, admin)


@router.put("/users/{user_id}/block", response_model=UserRead)
async def toggle_block_user(
    user_id: int,
    payload: Optional[BlockRequest] = None,
    admin: Identity = Depends(require_admin_identity),
    db: AsyncSession = Depends(get_db),
):
    return await svc.toggle_block(db, admin, user_id, payload.reason if payload else None)


__all__ = ["router"]
