"""
Request dependencies: authentication, role checks and the approved-seller gate.

Chained the same way on every protected route:

    current user (bearer token) -> role check -> approved seller (writes only)
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AuthenticationFailed, PermissionDenied
from app.core.security import decode_access_token
from app.database import get_db
from app.models import User, UserRole, UserStatus

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token to a live user row."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationFailed("No token provided")

    payload = decode_access_token(credentials.credentials)

    user = await db.get(User, payload["id"])
    if user is None:
        raise AuthenticationFailed("Invalid token")

    if user.status == UserStatus.SUSPENDED:
        raise PermissionDenied("Your account has been suspended. Contact admin.")

    return user


def require_role(*roles: UserRole):
    """Build a dependency that admits only the given roles."""

    async def _check_role(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            logger.warning(f"User #{user.id} ({user.role.value}) denied; needs {[r.value for r in roles]}")
            raise PermissionDenied("Access denied")
        return user

    return _check_role


require_admin = require_role(UserRole.ADMIN)
require_seller = require_role(UserRole.SELLER)
require_customer = require_role(UserRole.CUSTOMER)


async def require_approved_seller(user: User = Depends(require_seller)) -> User:
    """Block seller write actions until an admin approves the account."""
    if user.status != UserStatus.APPROVED:
        raise PermissionDenied(f"Seller account is {user.status.value}. Approval required.")
    return user
