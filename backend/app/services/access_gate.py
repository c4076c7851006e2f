"""
Access gate for routes acting on another user's wallet records.

Requests to ``/users/{user_id}/...`` pass when the caller is an admin or
manager, when the caller owns the records, or when an ``X-Access-Token``
header carries a live grant for ``user_id`` that permits the action.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.database import get_db
from app.models.temp_access import TempAccessGrant
from app.models.user import User
from app.services.auth_service import get_optional_user
from app.services.temp_access_service import GRANT_ACTIONS, temp_access_service
from app.utils.exceptions import AccessDeniedError

ACCESS_TOKEN_HEADER = "X-Access-Token"


@dataclass
class AccessContext:
    """Who is acting on ``owner_id``'s records, and how they were admitted."""

    owner_id: UUID
    requester: Optional[User] = None
    grant: Optional[TempAccessGrant] = None

    @property
    def via_grant(self) -> bool:
        return self.grant is not None

    def describe(self) -> str:
        if self.via_grant:
            return f"grant {self.grant.id}"
        if self.requester is not None:
            return f"{self.requester.role} {self.requester.username}"
        return "anonymous"


def require_owner_access(action: str):
    """
    Dependency factory gating ``/users/{user_id}/...`` routes.

    Args:
        action: One of ``view``, ``add``, ``edit``, ``delete``
    """
    if action not in GRANT_ACTIONS:
        raise ValueError(f"Unknown grant action '{action}'")

    async def dependency(
        user_id: UUID,
        access_token: Optional[str] = Header(None, alias=ACCESS_TOKEN_HEADER),
        requester: Optional[User] = Depends(get_optional_user),
        db: AsyncSession = Depends(get_db),
    ) -> AccessContext:
        if requester is not None and (requester.is_privileged() or requester.id == user_id):
            return AccessContext(owner_id=user_id, requester=requester)

        if not access_token:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied"
            )

        try:
            grant = await temp_access_service.check_access(db, access_token, user_id, action)
        except AccessDeniedError as e:
            logger.info(f"Rejected access token for {action} on user {user_id}: {e.message}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied"
            )

        return AccessContext(owner_id=user_id, requester=requester, grant=grant)

    return dependency
