"""
Authentication service for user management, JWT tokens, one-time codes and PINs.
"""

from datetime import datetime, timedelta
from typing import Optional, Tuple
from uuid import UUID
import hashlib
import hmac
import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from jose import JWTError, jwt
from loguru import logger

from app.core.database import get_db
from app.core.config import settings
from app.models.user import User, ROLE_USER
from app.utils.helpers import as_naive_utc, generate_numeric_code, utcnow


OTP_DIGITS = 6
INVITE_DIGITS = 8


class AuthService:
    """Service for authentication and authorization."""

    @staticmethod
    def _to_bytes(secret: str) -> bytes:
        secret_bytes = secret.encode("utf-8") if isinstance(secret, str) else secret
        # Bcrypt has a 72-byte limit - pre-hash longer secrets with SHA256
        if len(secret_bytes) > 72:
            logger.debug(f"Secret exceeds 72 bytes ({len(secret_bytes)}), pre-hashing with SHA256")
            secret_bytes = hashlib.sha256(secret_bytes).hexdigest().encode("utf-8")
        return secret_bytes

    def hash_password(self, password: str) -> str:
        """Hash a password (or PIN) using bcrypt."""
        hashed = bcrypt.hashpw(self._to_bytes(password), bcrypt.gensalt())
        return hashed.decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        """Verify a password (or PIN) against its hash."""
        if not hashed_password:
            return False
        try:
            return bcrypt.checkpw(self._to_bytes(plain_password), hashed_password.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is malformed")
            return False

    def create_access_token(self, user_id: UUID) -> str:
        """Create a JWT access token."""
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        to_encode = {
            "sub": str(user_id),
            "exp": expire,
            "type": "access"
        }
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    async def get_user_by_username(self, username: str, db: AsyncSession) -> Optional[User]:
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str, db: AsyncSession) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def get_user_by_login(self, identifier: str, db: AsyncSession) -> Optional[User]:
        """Find a user by username or email."""
        result = await db.execute(
            select(User).where(or_(User.username == identifier, User.email == identifier.lower()))
        )
        return result.scalars().first()

    async def get_user_by_id(self, user_id: str, db: AsyncSession) -> Optional[User]:
        """Get user by ID."""
        try:
            user_uuid = UUID(str(user_id))
        except ValueError:
            return None
        return await db.get(User, user_uuid)

    # One-time codes

    def issue_otp(
        self,
        user: User,
        digits: int = OTP_DIGITS,
        lifetime: Optional[timedelta] = None,
    ) -> str:
        """Store a fresh numeric code on the user and return it. Caller commits."""
        code = generate_numeric_code(digits)
        user.otp = code
        user.otp_expires_at = utcnow() + (lifetime or timedelta(minutes=settings.OTP_EXPIRE_MINUTES))
        return code

    def check_otp(self, user: User, code: str) -> bool:
        """True when ``code`` matches the stored, unexpired code."""
        if not user.otp or not code or not user.otp_expires_at:
            return False
        if utcnow() >= as_naive_utc(user.otp_expires_at):
            return False
        return hmac.compare_digest(user.otp.encode("utf-8"), str(code).encode("utf-8"))

    @staticmethod
    def clear_otp(user: User) -> None:
        user.otp = None
        user.otp_expires_at = None

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
        db: AsyncSession,
        role: str = ROLE_USER,
        is_verified: bool = False,
    ) -> Tuple[User, Optional[str]]:
        """
        Create a new user.

        Unverified users get a one-time code for email verification.

        Returns:
            Tuple of (user, verification code or None)
        """
        if await self.get_user_by_username(username, db):
            raise ValueError("Username already exists")
        if await self.get_user_by_email(email, db):
            raise ValueError("Email already exists")

        user = User(
            username=username,
            email=email.lower(),
            hashed_password=self.hash_password(password),
            is_active=True,
            is_verified=is_verified,
            role=role,
        )
        code = None if is_verified else self.issue_otp(user)

        db.add(user)
        await db.commit()
        await db.refresh(user)

        logger.info(f"Created new user: {username} (role={role})")
        return user, code

    async def authenticate_user(
        self,
        identifier: str,
        password: str,
        db: AsyncSession
    ) -> Optional[User]:
        """Authenticate a user with username or email and password."""
        user = await self.get_user_by_login(identifier, db)

        if not user or not user.is_active:
            return None

        if not self.verify_password(password, user.hashed_password):
            return None

        return user

    async def record_login(self, user: User, db: AsyncSession) -> None:
        user.last_login = utcnow()
        user.login_count = (user.login_count or 0) + 1
        await db.commit()

    # App lock PIN

    async def set_pin(self, user: User, pin: str, db: AsyncSession) -> None:
        user.app_lock_pin_hash = self.hash_password(pin)
        await db.commit()
        logger.info(f"App lock PIN set for user {user.username}")

    def verify_pin(self, user: User, pin: str) -> bool:
        return self.verify_password(pin, user.app_lock_pin_hash)

    async def update_password(
        self,
        user: User,
        new_password: str,
        db: AsyncSession
    ) -> None:
        user.hashed_password = self.hash_password(new_password)
        user.updated_at = datetime.utcnow()
        await db.commit()
        logger.info(f"Password updated for user {user.username}")

    # Token resolution

    async def _user_from_token(self, token: str, db: AsyncSession) -> Optional[User]:
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError:
            return None
        user_id = payload.get("sub")
        if user_id is None or payload.get("type") != "access":
            return None
        return await self.get_user_by_id(user_id, db)

    async def get_current_user(
        self,
        credentials: HTTPAuthorizationCredentials,
        db: AsyncSession
    ) -> User:
        """Get current user from JWT token."""
        user = await self._user_from_token(credentials.credentials, db)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Could not validate credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="User account is disabled"
            )

        return user

    async def get_optional_user(
        self,
        credentials: Optional[HTTPAuthorizationCredentials],
        db: AsyncSession
    ) -> Optional[User]:
        """Resolve the bearer token if one was sent; invalid tokens resolve to None."""
        if credentials is None:
            return None
        user = await self._user_from_token(credentials.credentials, db)
        if user is None or not user.is_active:
            return None
        return user


# Global instance for dependency injection
auth_service = AuthService()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(HTTPBearer()),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Dependency for getting current user."""
    return await auth_service.get_current_user(credentials, db)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(HTTPBearer(auto_error=False)),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """Dependency for routes that also serve anonymous callers."""
    return await auth_service.get_optional_user(credentials, db)


def require_roles(*roles: str):
    """Dependency factory admitting only users holding one of ``roles``."""

    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient privileges"
            )
        return current_user

    return dependency


async def require_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Dependency for requiring admin privileges."""
    if not current_user.is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required"
        )
    return current_user
