"""
Temporary access grant service.

Admins and managers issue short-lived grants that let the holder of a link
edit one user's wallet records. A grant stays usable for its whole window
(any number of edits) until it expires or is explicitly consumed; state
changes are single conditional UPDATEs so concurrent requests cannot race a
read-then-write.
"""

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.config import settings
from app.models.temp_access import TempAccessGrant, GRANT_TYPES, GRANT_TYPE_EDIT_PROFILE
from app.models.user import User
from app.utils.exceptions import AccessDeniedError, RecordNotFoundError, ValidationError
from app.utils.helpers import utcnow

DEFAULT_PERMISSIONS = {"canAdd": False, "canEdit": True, "canDelete": True}
GRANT_ACTIONS = ("view", "add", "edit", "delete")


@dataclass
class VerifyResult:
    """Outcome of a token verification."""

    valid: bool
    type: Optional[str] = None
    user_id: Optional[UUID] = None
    permissions: Dict[str, bool] = field(default_factory=dict)
    expires_at: Optional[datetime] = None
    reason: Optional[str] = None


class TempAccessService:
    """Issue, verify, consume and enforce delegated-edit grants."""

    TOKEN_BYTES = 32  # 64 hex characters

    def __init__(
        self,
        duration_minutes: Optional[int] = None,
        retention_days: Optional[int] = None,
        frontend_url: Optional[str] = None,
    ):
        self.duration = timedelta(minutes=duration_minutes or settings.TEMP_ACCESS_DURATION_MINUTES)
        self.retention = timedelta(days=retention_days or settings.TEMP_ACCESS_RETENTION_DAYS)
        self.frontend_url = (frontend_url or settings.FRONTEND_URL).rstrip("/")

    def generate_token(self) -> str:
        return secrets.token_hex(self.TOKEN_BYTES)

    def build_link(self, token: str) -> str:
        return f"{self.frontend_url}/secure-edit?token={token}"

    async def grant(
        self,
        db: AsyncSession,
        user_id: UUID,
        issued_by: Optional[User] = None,
        type: str = GRANT_TYPE_EDIT_PROFILE,
        permissions: Optional[Dict[str, bool]] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[TempAccessGrant, str]:
        """
        Issue a grant for ``user_id``.

        Args:
            db: Database session
            user_id: User whose records the grant covers
            issued_by: Admin or manager issuing the grant
            type: Grant type (only ``edit_profile`` exists)
            permissions: ``{canAdd, canEdit, canDelete}``; missing keys use defaults
            now: Issuance time (defaults to the current UTC time)

        Returns:
            Tuple of (grant, client-facing link embedding the token)
        """
        if type not in GRANT_TYPES:
            raise ValidationError(f"Unsupported grant type '{type}'", field="type")

        target = await db.get(User, user_id)
        if target is None:
            raise RecordNotFoundError("User", str(user_id))

        flags = {**DEFAULT_PERMISSIONS, **(permissions or {})}
        now = now or utcnow()

        grant = TempAccessGrant(
            user_id=user_id,
            issued_by_id=issued_by.id if issued_by else None,
            token=self.generate_token(),
            type=type,
            expires_at=now + self.duration,
            used=False,
            can_add=bool(flags["canAdd"]),
            can_edit=bool(flags["canEdit"]),
            can_delete=bool(flags["canDelete"]),
            duration_seconds=int(self.duration.total_seconds()),
            created_at=now,
        )
        db.add(grant)
        await db.commit()
        await db.refresh(grant)

        logger.info(
            f"Issued {type} grant {grant.id} for user {user_id} "
            f"by {issued_by.username if issued_by else 'system'}, expires {grant.expires_at.isoformat()}"
        )
        return grant, self.build_link(grant.token)

    async def _find_live(
        self,
        db: AsyncSession,
        token: str,
        user_id: Optional[UUID] = None,
    ) -> Optional[TempAccessGrant]:
        query = select(TempAccessGrant).where(
            TempAccessGrant.token == token,
            TempAccessGrant.used == False,  # noqa: E712
        )
        if user_id is not None:
            query = query.where(TempAccessGrant.user_id == user_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def verify(self, db: AsyncSession, token: str, now: Optional[datetime] = None) -> VerifyResult:
        """
        Check a token without consuming it.

        Repeated calls during the window keep returning ``valid=True``. The
        first successful call stamps ``started_at``.
        """
        if not token:
            return VerifyResult(valid=False, reason="Invalid link")

        now = now or utcnow()
        grant = await self._find_live(db, token)
        if grant is None:
            return VerifyResult(valid=False, reason="Invalid link")

        if grant.is_expired(now):
            return VerifyResult(valid=False, reason="Link has expired")

        if grant.started_at is None:
            await db.execute(
                update(TempAccessGrant)
                .where(TempAccessGrant.id == grant.id, TempAccessGrant.started_at.is_(None))
                .values(started_at=now)
            )
            await db.commit()

        return VerifyResult(
            valid=True,
            type=grant.type,
            user_id=grant.user_id,
            permissions=grant.permissions,
            expires_at=grant.expires_at,
        )

    async def consume(self, db: AsyncSession, token: str) -> bool:
        """
        Mark a grant used, ending its session.

        Returns True if a grant with this token exists, whatever its prior state.
        """
        if not token:
            return False
        result = await db.execute(
            update(TempAccessGrant)
            .where(TempAccessGrant.token == token)
            .values(used=True)
        )
        await db.commit()
        consumed = (result.rowcount or 0) > 0
        if consumed:
            logger.info("Temporary access grant consumed")
        return consumed

    async def check_access(
        self,
        db: AsyncSession,
        token: str,
        owner_id: UUID,
        action: str,
        now: Optional[datetime] = None,
    ) -> TempAccessGrant:
        """
        Enforce a presented token for an action on ``owner_id``'s records.

        The grant is left valid for the rest of its window.

        Raises:
            AccessDeniedError: token unknown, consumed, bound to another user,
                expired, or lacking the capability for ``action``
        """
        if action not in GRANT_ACTIONS:
            raise ValueError(f"Unknown grant action '{action}'")
        if not token:
            raise AccessDeniedError("Access token required")

        grant = await self._find_live(db, token, user_id=owner_id)
        return self._enforce(grant, action, now)

    async def authorize_token(
        self,
        db: AsyncSession,
        token: str,
        action: str,
        now: Optional[datetime] = None,
    ) -> TempAccessGrant:
        """Like ``check_access`` for callers that learn the owner from the grant itself."""
        if action not in GRANT_ACTIONS:
            raise ValueError(f"Unknown grant action '{action}'")
        if not token:
            raise AccessDeniedError("Access token required")
        grant = await self._find_live(db, token)
        return self._enforce(grant, action, now)

    @staticmethod
    def _enforce(grant: Optional[TempAccessGrant], action: str, now: Optional[datetime]) -> TempAccessGrant:
        if grant is None:
            raise AccessDeniedError("Invalid access token")
        if grant.is_expired(now or utcnow()):
            raise AccessDeniedError("Access token expired")
        if not grant.allows(action):
            raise AccessDeniedError(f"Access token does not permit '{action}'")
        return grant

    async def purge_stale(self, db: AsyncSession, now: Optional[datetime] = None) -> int:
        """Hard-delete grants created more than the retention period ago, in any state."""
        cutoff = (now or utcnow()) - self.retention
        result = await db.execute(
            delete(TempAccessGrant).where(TempAccessGrant.created_at < cutoff)
        )
        await db.commit()
        purged = result.rowcount or 0
        if purged:
            logger.info(f"Purged {purged} stale temporary access grants")
        return purged


# Global instance for dependency injection
temp_access_service = TempAccessService()
