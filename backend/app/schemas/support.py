"""
Support ticket schemas.
"""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID
from pydantic import BaseModel, Field


class TicketCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1, max_length=5000)
    type: Literal["card_variant", "support", "bug"]


class TicketReply(BaseModel):
    message: str = Field(..., min_length=1, max_length=5000)


class TicketAssign(BaseModel):
    manager_id: Optional[UUID] = Field(None, alias="managerId")

    class Config:
        populate_by_name = True


class TicketUser(BaseModel):
    id: UUID
    username: str
    email: str

    class Config:
        from_attributes = True


class TicketMessageResponse(BaseModel):
    id: UUID
    sender: str
    sender_name: Optional[str]
    message: str
    created_at: datetime

    class Config:
        from_attributes = True


class TicketResponse(BaseModel):
    """Ticket with its conversation."""
    id: UUID
    user_id: UUID
    subject: str
    message: str
    type: str
    status: str
    escalated: bool
    assigned_to_id: Optional[UUID]
    closed_at: Optional[datetime]
    last_message_at: Optional[datetime]
    last_message_sender: str
    created_at: datetime
    messages: List[TicketMessageResponse] = []
    user: Optional[TicketUser] = None

    class Config:
        from_attributes = True
