"""
Support ticket endpoints for end users.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.services.auth_service import get_current_user
from app.services.support_service import support_service
from app.schemas.support import TicketCreate, TicketReply, TicketResponse

router = APIRouter()


@router.post("", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    payload: TicketCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Open a new support ticket."""
    return await support_service.create(
        db, current_user, subject=payload.subject, message=payload.message, type=payload.type
    )


@router.get("", response_model=List[TicketResponse])
async def list_tickets(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """The caller's tickets, newest first."""
    return await support_service.list_for_user(db, current_user)


@router.post("/{ticket_id}/reply", response_model=TicketResponse)
async def reply_to_ticket(
    ticket_id: UUID,
    payload: TicketReply,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Add a message to one of the caller's tickets."""
    return await support_service.user_reply(db, current_user, ticket_id, payload.message)
