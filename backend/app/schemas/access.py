"""
Delegated access grant schemas.

These payloads use camelCase on the wire for the secure-edit client.
"""

from datetime import datetime
from typing import Any, Dict, Literal, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class GrantPermissions(BaseModel):
    can_add: bool = Field(False, alias="canAdd")
    can_edit: bool = Field(True, alias="canEdit")
    can_delete: bool = Field(True, alias="canDelete")

    model_config = ConfigDict(populate_by_name=True)

    def as_flags(self) -> Dict[str, bool]:
        return self.model_dump(by_alias=True)


class GrantRequest(BaseModel):
    user_id: UUID = Field(..., alias="userId")
    type: str = "edit_profile"
    permissions: Optional[GrantPermissions] = None

    model_config = ConfigDict(populate_by_name=True)


class GrantResponse(BaseModel):
    success: bool = True
    token: str
    expires_at: datetime = Field(..., alias="expiresAt")
    link: str

    model_config = ConfigDict(populate_by_name=True)


class TokenRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=128)


class VerifyResponse(BaseModel):
    valid: bool
    type: Optional[str] = None
    user_id: Optional[UUID] = Field(None, alias="userId")
    permissions: Optional[GrantPermissions] = None
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")
    message: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class ConsumeResponse(BaseModel):
    success: bool


class UpdateDataRequest(BaseModel):
    """Edit a user's data with a grant token instead of a login."""
    token: str = Field(..., min_length=1, max_length=128)
    type: Literal["profile", "card", "bank", "address"]
    data: Dict[str, Any]


class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
