"""
Support ticket workflow shared by the user, manager and admin routes.
"""

from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.config import settings
from app.models.support_ticket import (
    SupportTicket,
    TicketMessage,
    TICKET_TYPES,
    TICKET_STATUS_OPEN,
    TICKET_STATUS_IN_PROGRESS,
    TICKET_STATUS_CLOSED,
    SENDER_USER,
    SENDER_AGENT,
)
from app.models.user import User, ROLE_ADMIN, ROLE_MANAGER
from app.utils.exceptions import AccessDeniedError, RecordNotFoundError, ValidationError
from app.utils.helpers import as_naive_utc, utcnow


class SupportService:
    """Create, list and move support tickets through their lifecycle."""

    def __init__(self, closed_retention_hours: Optional[int] = None):
        self.closed_retention = timedelta(
            hours=closed_retention_hours or settings.CLOSED_TICKET_RETENTION_HOURS
        )

    async def purge_closed(self, db: AsyncSession, now: Optional[datetime] = None) -> int:
        """Delete tickets closed longer ago than the retention window."""
        cutoff = (now or utcnow()) - self.closed_retention
        expired = select(SupportTicket.id).where(
            SupportTicket.status == TICKET_STATUS_CLOSED,
            SupportTicket.closed_at < cutoff,
        )
        await db.execute(delete(TicketMessage).where(TicketMessage.ticket_id.in_(expired)))
        result = await db.execute(delete(SupportTicket).where(SupportTicket.id.in_(expired)))
        await db.commit()
        purged = result.rowcount or 0
        if purged:
            logger.info(f"Purged {purged} closed support tickets")
        return purged

    async def _get(self, db: AsyncSession, ticket_id: UUID) -> SupportTicket:
        ticket = await db.get(SupportTicket, ticket_id)
        if ticket is None:
            raise RecordNotFoundError("Ticket", str(ticket_id))
        return ticket

    async def get_for_staff(self, db: AsyncSession, ticket_id: UUID, staff: User) -> SupportTicket:
        """Managers only see tickets assigned to them."""
        ticket = await self._get(db, ticket_id)
        if staff.role == ROLE_MANAGER and ticket.assigned_to_id != staff.id:
            raise RecordNotFoundError("Ticket", str(ticket_id))
        return ticket

    async def _reload(self, db: AsyncSession, ticket: SupportTicket) -> SupportTicket:
        await db.commit()
        await db.refresh(ticket)
        return ticket

    async def create(
        self,
        db: AsyncSession,
        user: User,
        subject: str,
        message: str,
        type: str,
    ) -> SupportTicket:
        if type not in TICKET_TYPES:
            raise ValidationError(f"Unsupported ticket type '{type}'", field="type")

        now = utcnow()
        ticket = SupportTicket(
            user_id=user.id,
            subject=subject,
            message=message,
            type=type,
            status=TICKET_STATUS_OPEN,
            last_message_at=now,
            last_message_sender=SENDER_USER,
            created_at=now,
        )
        db.add(ticket)
        await db.commit()
        await db.refresh(ticket)
        logger.info(f"User {user.username} opened ticket {ticket.id} ({type})")
        return ticket

    async def list_for_user(self, db: AsyncSession, user: User) -> List[SupportTicket]:
        await self.purge_closed(db)
        result = await db.execute(
            select(SupportTicket)
            .where(SupportTicket.user_id == user.id)
            .order_by(SupportTicket.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_staff(self, db: AsyncSession, staff: User) -> List[SupportTicket]:
        """Admins see every ticket, escalated first; managers see their assignments."""
        await self.purge_closed(db)
        query = select(SupportTicket)
        if staff.is_admin():
            query = query.order_by(SupportTicket.escalated.desc(), SupportTicket.last_message_at.desc())
        else:
            query = query.where(SupportTicket.assigned_to_id == staff.id).order_by(
                SupportTicket.created_at.desc()
            )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def user_reply(
        self,
        db: AsyncSession,
        user: User,
        ticket_id: UUID,
        message: str,
    ) -> SupportTicket:
        """
        Append a user message.

        Blocked while an open ticket still waits on an agent. Replying to a
        recently closed ticket reopens it.
        """
        ticket = await self._get(db, ticket_id)
        if ticket.user_id != user.id:
            raise AccessDeniedError("Not authorized")

        if ticket.status == TICKET_STATUS_OPEN and ticket.last_message_sender == SENDER_USER:
            raise ValidationError("Please wait for an agent to respond before sending another message.")

        now = utcnow()
        if ticket.status == TICKET_STATUS_CLOSED:
            closed_at = as_naive_utc(ticket.closed_at)
            if closed_at is not None and now - closed_at > self.closed_retention:
                raise ValidationError("Ticket closed for more than 24 hours. Please create a new one.")
            ticket.status = TICKET_STATUS_OPEN
            ticket.closed_at = None

        ticket.messages.append(TicketMessage(sender=SENDER_USER, message=message, created_at=now))
        ticket.last_message_at = now
        ticket.last_message_sender = SENDER_USER
        return await self._reload(db, ticket)

    async def agent_reply(
        self,
        db: AsyncSession,
        agent: User,
        ticket_id: UUID,
        message: str,
    ) -> SupportTicket:
        ticket = await self.get_for_staff(db, ticket_id, agent)
        now = utcnow()
        ticket.messages.append(
            TicketMessage(
                sender=SENDER_AGENT,
                sender_name=agent.username or "Support Agent",
                message=message,
                created_at=now,
            )
        )
        ticket.last_message_at = now
        ticket.last_message_sender = SENDER_AGENT
        if ticket.status == TICKET_STATUS_OPEN:
            ticket.status = TICKET_STATUS_IN_PROGRESS
        return await self._reload(db, ticket)

    async def close(self, db: AsyncSession, staff: User, ticket_id: UUID) -> SupportTicket:
        ticket = await self.get_for_staff(db, ticket_id, staff)
        ticket.status = TICKET_STATUS_CLOSED
        ticket.closed_at = utcnow()
        logger.info(f"{staff.username} closed ticket {ticket.id}")
        return await self._reload(db, ticket)

    async def reopen(self, db: AsyncSession, staff: User, ticket_id: UUID) -> SupportTicket:
        # Staff may reopen regardless of how long the ticket has been closed
        ticket = await self.get_for_staff(db, ticket_id, staff)
        ticket.status = TICKET_STATUS_OPEN
        ticket.closed_at = None
        return await self._reload(db, ticket)

    async def escalate(self, db: AsyncSession, staff: User, ticket_id: UUID) -> SupportTicket:
        ticket = await self.get_for_staff(db, ticket_id, staff)
        ticket.escalated = True
        logger.info(f"{staff.username} escalated ticket {ticket.id}")
        return await self._reload(db, ticket)

    async def assign(self, db: AsyncSession, ticket_id: UUID, manager_id: Optional[UUID]) -> SupportTicket:
        ticket = await self._get(db, ticket_id)
        if manager_id is not None:
            manager = await db.get(User, manager_id)
            if manager is None or manager.role not in (ROLE_MANAGER, ROLE_ADMIN):
                raise ValidationError("Assignee must be a manager or admin", field="managerId")
        ticket.assigned_to_id = manager_id
        return await self._reload(db, ticket)

    async def delete(self, db: AsyncSession, ticket_id: UUID) -> None:
        ticket = await self._get(db, ticket_id)
        await db.delete(ticket)
        await db.commit()
        logger.info(f"Deleted ticket {ticket_id}")

    async def count(self, db: AsyncSession, status: Optional[str] = None) -> int:
        query = select(func.count(SupportTicket.id))
        if status is not None:
            query = query.where(SupportTicket.status == status)
        return (await db.execute(query)).scalar() or 0


# Global instance for dependency injection
support_service = SupportService()
