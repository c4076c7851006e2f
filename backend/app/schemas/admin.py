"""
Admin-related Pydantic schemas.
"""

from datetime import datetime
from typing import Dict, Literal, Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field


class HealthCheckServiceResponse(BaseModel):
    """Schema for individual service health status."""
    status: str
    message: Optional[str] = None
    error: Optional[str] = None


class HealthCheckResponse(BaseModel):
    """Schema for system health check response."""
    timestamp: str
    overall_status: str
    services: Dict[str, HealthCheckServiceResponse]


class AnalyticsResponse(BaseModel):
    """Headline counts for the admin dashboard."""
    users: int
    managers: int
    total_tickets: int = Field(..., alias="totalTickets")
    open_tickets: int = Field(..., alias="openTickets")

    class Config:
        populate_by_name = True


class AdminUserResponse(BaseModel):
    """User as listed to admins; never includes password or PIN hashes."""
    id: UUID
    username: str
    email: str
    role: str
    is_active: bool
    is_verified: bool
    can_screenshot: bool
    last_login: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class RoleUpdate(BaseModel):
    role: Literal["user", "manager", "admin"]


class PermissionsUpdate(BaseModel):
    can_screenshot: Optional[bool] = Field(None, alias="canScreenshot")

    class Config:
        populate_by_name = True


class ManagerInvite(BaseModel):
    email: EmailStr
