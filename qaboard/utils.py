from fastapi import Depends

from .errors import Unauthenticated
from .models import User, UserRole
from .services.policy import Identity, ensure_not_blocked, require_role
from .users import current_optional_user


# Dependency to enforce authentication (non-admin user is OK)
async def require_authenticated_user(user: User = Depends(current_optional_user)) -> User:
    if not user:
        raise Unauthenticated()
    # blocked accounts stop here, before any policy check
    ensure_not_blocked(Identity.from_user(user))
    return user


async def require_identity(user: User = Depends(require_authenticated_user)) -> Identity:
    return Identity.from_user(user)


async def require_admin_identity(identity: Identity = Depends(require_identity)) -> Identity:
    return require_role(identity, UserRole.admin)
