"""
Temporary access grant model.

A grant lets a support-issued link holder act on one user's wallet records for
a short window. It confers no identity, only the capability flags below.
"""

from datetime import datetime
from typing import Dict, Optional
import uuid

from sqlalchemy import Column, String, DateTime, Boolean, Integer, ForeignKey, Uuid

from app.core.database import Base
from app.utils.helpers import as_naive_utc, utcnow


GRANT_TYPE_EDIT_PROFILE = "edit_profile"
GRANT_TYPES = (GRANT_TYPE_EDIT_PROFILE,)


class TempAccessGrant(Base):
    """Time-boxed delegated-edit grant keyed to a target user."""

    __tablename__ = "temp_access_grants"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Target user whose records may be edited
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Admin/manager who issued the grant
    issued_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    token = Column(String(64), unique=True, nullable=False, index=True)
    type = Column(String(32), nullable=False, default=GRANT_TYPE_EDIT_PROFILE)

    expires_at = Column(DateTime(timezone=True), nullable=False)
    used = Column(Boolean, nullable=False, default=False)

    # Capability flags
    can_add = Column(Boolean, nullable=False, default=False)
    can_edit = Column(Boolean, nullable=False, default=True)
    can_delete = Column(Boolean, nullable=False, default=True)

    # First successful verification, and the configured window length
    started_at = Column(DateTime(timezone=True), nullable=True)
    duration_seconds = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<TempAccessGrant(id={self.id}, user_id={self.user_id}, used={self.used})>"

    @property
    def permissions(self) -> Dict[str, bool]:
        return {
            "canAdd": bool(self.can_add),
            "canEdit": bool(self.can_edit),
            "canDelete": bool(self.can_delete),
        }

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= as_naive_utc(self.expires_at)

    def allows(self, action: str) -> bool:
        """Check a capability flag. ``view`` is implied by any live grant."""
        if action == "view":
            return True
        if action == "add":
            return bool(self.can_add)
        if action == "edit":
            return bool(self.can_edit)
        if action == "delete":
            return bool(self.can_delete)
        return False
