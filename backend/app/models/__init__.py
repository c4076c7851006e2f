"""
Database models for the Secure Wallet application.
"""

from .user import User
from .wallet import Card, BankAccount, Address
from .temp_access import TempAccessGrant
from .support_ticket import SupportTicket, TicketMessage

__all__ = [
    "User",
    "Card",
    "BankAccount",
    "Address",
    "TempAccessGrant",
    "SupportTicket",
    "TicketMessage",
]
