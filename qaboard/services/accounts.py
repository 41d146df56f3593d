# services/accounts.py
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from qaboard.errors import NotFound, ValidationError
from qaboard.models import User, UserRole
from qaboard.services import policy
from qaboard.services.policy import Identity

logger = logging.getLogger(__name__)


async def list_users(db: AsyncSession, identity: Identity) -> list[User]:
    policy.require_role(identity, UserRole.admin)
    rows = (await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))).scalars().all()
    return list(rows)


async def toggle_block(db: AsyncSession, identity: Identity, user_id: int, reason: Optional[str] = None) -> User:
    """Block an unblocked user (keeping the reason) or unblock a blocked one."""
    policy.require_role(identity, UserRole.admin)
    if user_id == identity.id:
        raise ValidationError("You cannot block your own account.")

    target = await db.get(User, user_id)
    if not target:
        raise NotFound("User not found")

    if target.is_blocked:
        target.is_blocked = False
        target.blocked_reason = None
        logger.info("Admin %s unblocked user %s", identity.id, target.id)
    else:
        target.is_blocked = True
        target.blocked_reason = (reason or "").strip() or None
        logger.info("Admin %s blocked user %s", identity.id, target.id)

    await db.commit()
    await db.refresh(target)
    return target
