"""
Support ticket models.
"""

from datetime import datetime
import uuid

from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from app.core.database import Base


TICKET_TYPES = ("card_variant", "support", "bug")
TICKET_STATUS_OPEN = "open"
TICKET_STATUS_IN_PROGRESS = "in_progress"
TICKET_STATUS_CLOSED = "closed"
SENDER_USER = "user"
SENDER_AGENT = "agent"


class SupportTicket(Base):
    """A user's support request and its conversation."""

    __tablename__ = "support_tickets"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_to_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(20), nullable=False, default="support")
    status = Column(String(20), nullable=False, default=TICKET_STATUS_OPEN, index=True)
    escalated = Column(Boolean, nullable=False, default=False)

    closed_at = Column(DateTime(timezone=True), nullable=True)
    last_message_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    last_message_sender = Column(String(10), nullable=False, default=SENDER_USER)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    user = relationship("User", foreign_keys=[user_id], lazy="selectin")
    assigned_to = relationship("User", foreign_keys=[assigned_to_id], lazy="selectin")
    messages = relationship(
        "TicketMessage",
        back_populates="ticket",
        cascade="all, delete-orphan",
        order_by="TicketMessage.created_at",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<SupportTicket(id={self.id}, status='{self.status}')>"


class TicketMessage(Base):
    """One message in a ticket conversation."""

    __tablename__ = "support_ticket_messages"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    ticket_id = Column(Uuid(as_uuid=True), ForeignKey("support_tickets.id", ondelete="CASCADE"), nullable=False, index=True)

    sender = Column(String(10), nullable=False)  # user or agent
    sender_name = Column(String(50), nullable=True)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    ticket = relationship("SupportTicket", back_populates="messages")
