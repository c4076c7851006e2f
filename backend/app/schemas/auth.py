"""
Authentication-related Pydantic schemas.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field

PIN_PATTERN = r"^\d{4}$"


class UserLogin(BaseModel):
    """Schema for user login by username or email."""
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6, max_length=100)


class UserRegister(BaseModel):
    """Schema for user registration."""
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)


class OTPVerify(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=4, max_length=16)


class UserResponse(BaseModel):
    """Schema for user response."""
    id: UUID
    username: str
    email: str
    role: str
    is_active: bool
    is_verified: bool
    has_pin: bool
    can_screenshot: bool
    last_login: Optional[datetime]
    login_count: int
    created_at: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Schema for token response."""
    access_token: str
    token_type: str
    user: UserResponse


class RegisterResponse(BaseModel):
    message: str
    email: str


class PinSet(BaseModel):
    pin: str = Field(..., pattern=PIN_PATTERN)


class PinVerify(BaseModel):
    pin: str = Field(..., pattern=PIN_PATTERN)


class PinResetWithPassword(BaseModel):
    password: str = Field(..., min_length=6, max_length=100)
    new_pin: str = Field(..., pattern=PIN_PATTERN)


class PasswordVerify(BaseModel):
    password: str = Field(..., min_length=1, max_length=100)


class ForgotPassword(BaseModel):
    email: EmailStr


class PasswordReset(BaseModel):
    """Schema for resetting a password with an emailed code."""
    email: EmailStr
    otp: str = Field(..., min_length=4, max_length=16)
    new_password: str = Field(..., min_length=6, max_length=100)


class ManagerSetup(BaseModel):
    """Schema for accepting a manager invitation."""
    email: EmailStr
    otp: str = Field(..., min_length=8, max_length=8)


class BackupPayload(BaseModel):
    """Opaque client-encrypted backup blob."""
    data: str = Field(..., min_length=1)


class BackupResponse(BaseModel):
    data: Optional[str] = None
