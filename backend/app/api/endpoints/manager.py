"""
Ticket handling endpoints for managers and admins.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User, ROLE_ADMIN, ROLE_MANAGER
from app.services.auth_service import require_admin, require_roles
from app.services.support_service import support_service
from app.schemas.support import TicketAssign, TicketReply, TicketResponse

router = APIRouter()

require_staff = require_roles(ROLE_MANAGER, ROLE_ADMIN)


@router.get("/tickets", response_model=List[TicketResponse])
async def list_tickets(
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """Tickets visible to the caller: all for admins, assigned ones for managers."""
    return await support_service.list_for_staff(db, current_user)


@router.put("/tickets/{ticket_id}/assign", response_model=TicketResponse)
async def assign_ticket(
    ticket_id: UUID,
    payload: TicketAssign,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await support_service.assign(db, ticket_id, payload.manager_id)


@router.post("/tickets/{ticket_id}/reply", response_model=TicketResponse)
async def reply_to_ticket(
    ticket_id: UUID,
    payload: TicketReply,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    return await support_service.agent_reply(db, current_user, ticket_id, payload.message)


@router.post("/tickets/{ticket_id}/close", response_model=TicketResponse)
async def close_ticket(
    ticket_id: UUID,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    return await support_service.close(db, current_user, ticket_id)


@router.post("/tickets/{ticket_id}/reopen", response_model=TicketResponse)
async def reopen_ticket(
    ticket_id: UUID,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    return await support_service.reopen(db, current_user, ticket_id)


@router.post("/tickets/{ticket_id}/escalate", response_model=TicketResponse)
async def escalate_ticket(
    ticket_id: UUID,
    current_user: User = Depends(require_roles(ROLE_MANAGER)),
    db: AsyncSession = Depends(get_db)
):
    """Flag a ticket for admin attention."""
    return await support_service.escalate(db, current_user, ticket_id)
