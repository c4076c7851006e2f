"""
Admin API endpoints for users, managers and support oversight.
"""

from datetime import datetime, timedelta
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, func, text
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.database import get_db
from app.core.config import settings
from app.models.support_ticket import TICKET_STATUS_OPEN
from app.models.user import User, ROLE_MANAGER, ROLE_USER
from app.services.auth_service import auth_service, require_admin, INVITE_DIGITS
from app.services.email_service import email_service
from app.services.support_service import support_service
from app.schemas.admin import (
    AdminUserResponse,
    AnalyticsResponse,
    HealthCheckResponse,
    HealthCheckServiceResponse,
    ManagerInvite,
    PermissionsUpdate,
    RoleUpdate,
)
from app.schemas.common import SuccessResponse
from app.schemas.support import TicketResponse

router = APIRouter()


async def _get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/health", response_model=HealthCheckResponse)
async def get_system_health(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Get system health status.

    Checks database connectivity and reports the configured email backend.
    """
    services = {}
    try:
        await db.execute(text("SELECT 1"))
        services["database"] = HealthCheckServiceResponse(status="healthy")
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        services["database"] = HealthCheckServiceResponse(status="unhealthy", error="Database unreachable")

    services["email"] = HealthCheckServiceResponse(status="healthy", message=f"backend={settings.EMAIL_BACKEND}")

    overall = "healthy" if all(s.status == "healthy" for s in services.values()) else "degraded"
    return HealthCheckResponse(
        timestamp=datetime.utcnow().isoformat(),
        overall_status=overall,
        services=services,
    )


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Headline user and ticket counts."""
    users = (await db.execute(select(func.count(User.id)).where(User.role == ROLE_USER))).scalar() or 0
    managers = (await db.execute(select(func.count(User.id)).where(User.role == ROLE_MANAGER))).scalar() or 0
    return AnalyticsResponse(
        users=users,
        managers=managers,
        total_tickets=await support_service.count(db),
        open_tickets=await support_service.count(db, status=TICKET_STATUS_OPEN),
    )


@router.get("/users", response_model=List[AdminUserResponse])
async def list_users(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return result.scalars().all()


@router.put("/users/{user_id}/role", response_model=SuccessResponse)
async def update_user_role(
    user_id: UUID,
    payload: RoleUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="Admins cannot change their own role")

    user = await _get_user_or_404(db, user_id)
    previous = user.role
    user.role = payload.role
    await db.commit()
    logger.info(f"Admin {current_user.username} changed role of {user.username}: {previous} -> {payload.role}")
    return SuccessResponse(message="User role updated successfully")


@router.put("/users/{user_id}/permissions", response_model=SuccessResponse)
async def update_user_permissions(
    user_id: UUID,
    payload: PermissionsUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    user = await _get_user_or_404(db, user_id)
    if payload.can_screenshot is not None:
        user.can_screenshot = payload.can_screenshot
    await db.commit()
    return SuccessResponse(
        message="User permissions updated successfully",
        data={"canScreenshot": bool(user.can_screenshot)},
    )


@router.get("/managers", response_model=List[AdminUserResponse])
async def list_managers(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(User).where(User.role == ROLE_MANAGER).order_by(User.username))
    return result.scalars().all()


@router.post("/invite-manager", response_model=SuccessResponse)
async def invite_manager(
    payload: ManagerInvite,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Email an 8-digit setup code to an existing, verified user.

    The user accepts through ``/auth/setup-manager``.
    """
    user = await auth_service.get_user_by_email(payload.email, db)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found. Please ask them to register first.")
    if not user.is_verified:
        raise HTTPException(
            status_code=400,
            detail="User exists but is not verified. They must verify their email first."
        )
    if user.role != ROLE_USER:
        raise HTTPException(status_code=400, detail="User is already a Manager or Admin.")

    code = auth_service.issue_otp(
        user,
        digits=INVITE_DIGITS,
        lifetime=timedelta(hours=settings.MANAGER_INVITE_EXPIRE_HOURS),
    )
    await db.commit()

    if not await email_service.send_manager_invite(user.email, user.username, code):
        raise HTTPException(status_code=502, detail="Failed to send invitation email")

    logger.info(f"Admin {current_user.username} invited {user.username} to become a manager")
    return SuccessResponse(message="Invitation sent to email")


@router.get("/tickets", response_model=List[TicketResponse])
async def list_all_tickets(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """All tickets, escalated first, then by most recent activity."""
    return await support_service.list_for_staff(db, current_user)


@router.delete("/tickets/{ticket_id}", response_model=SuccessResponse)
async def delete_ticket(
    ticket_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await support_service.delete(db, ticket_id)
    return SuccessResponse(message="Ticket deleted successfully")
