"""
User-related database models.
"""

from datetime import datetime
import uuid

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Uuid

from app.core.database import Base


ROLE_USER = "user"
ROLE_MANAGER = "manager"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_MANAGER, ROLE_ADMIN)
PRIVILEGED_ROLES = (ROLE_MANAGER, ROLE_ADMIN)


class User(Base):
    """User model for authentication and authorization."""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Basic information
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)

    # Authentication
    hashed_password = Column(String(128), nullable=False)
    is_active = Column(Boolean, default=True)
    is_verified = Column(Boolean, default=False)

    # One-time codes (email verification, password reset, manager invite)
    otp = Column(String(16), nullable=True)
    otp_expires_at = Column(DateTime(timezone=True), nullable=True)

    # App lock PIN (bcrypt hash) and client-encrypted cloud backup
    app_lock_pin_hash = Column(String(128), nullable=True)
    encrypted_backup = Column(Text, nullable=True)

    # Authorization
    role = Column(String(20), default=ROLE_USER, nullable=False)  # user, manager, admin
    can_screenshot = Column(Boolean, default=False)

    # Activity tracking
    last_login = Column(DateTime(timezone=True), nullable=True)
    login_count = Column(Integer, default=0)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"

    @property
    def has_pin(self) -> bool:
        return bool(self.app_lock_pin_hash)

    def is_admin(self) -> bool:
        """Check if user is admin."""
        return self.role == ROLE_ADMIN

    def is_privileged(self) -> bool:
        """Admins and managers may act on other users' records."""
        return self.role in PRIVILEGED_ROLES
