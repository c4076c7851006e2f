"""
Wallet record models: payment cards, bank accounts and addresses.

Every sensitive attribute is stored as an ``encrypted_<field>`` / ``<field>_iv``
column pair (hex ciphertext and hex IV). Models only declare which fields are
encrypted; reading and writing them goes through
``app.services.sensitive_fields.SensitiveFieldCodec``.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Tuple
import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Uuid

from app.core.database import Base


CARD_CATEGORIES = ("credit", "debit", "forex", "identity")
ACCOUNT_TYPES = ("savings", "current")


@dataclass(frozen=True)
class EncryptedField:
    """Declaration of one encrypted attribute and its read fallback."""

    name: str
    fallback: str = "Encrypted"

    @property
    def content_attr(self) -> str:
        return f"encrypted_{self.name}"

    @property
    def iv_attr(self) -> str:
        return f"{self.name}_iv"


def _fields(*specs: EncryptedField) -> Dict[str, EncryptedField]:
    return {spec.name: spec for spec in specs}


class Card(Base):
    """Payment or identity card."""

    __tablename__ = "cards"

    __encrypted_fields__ = _fields(
        EncryptedField("number", fallback="****"),
        EncryptedField("cvv", fallback="***"),
        EncryptedField("holder"),
        EncryptedField("expiry"),
        EncryptedField("pin", fallback="****"),
        EncryptedField("bank"),
    )
    __plain_fields__: Tuple[str, ...] = ("type", "theme", "category", "image")

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    encrypted_number = Column(Text, nullable=True)
    number_iv = Column(String(32), nullable=True)
    last4 = Column(String(4), nullable=True)  # stored in the clear for masked display

    encrypted_cvv = Column(Text, nullable=True)
    cvv_iv = Column(String(32), nullable=True)

    encrypted_holder = Column(Text, nullable=True)
    holder_iv = Column(String(32), nullable=True)

    encrypted_expiry = Column(Text, nullable=True)
    expiry_iv = Column(String(32), nullable=True)

    encrypted_pin = Column(Text, nullable=True)
    pin_iv = Column(String(32), nullable=True)

    encrypted_bank = Column(Text, nullable=True)
    bank_iv = Column(String(32), nullable=True)

    type = Column(String(50), nullable=False)  # visa, mastercard, aadhaar, ...
    theme = Column(String(50), nullable=False)
    category = Column(String(20), nullable=False, default="credit")
    image = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Card(id={self.id}, type='{self.type}', last4='{self.last4}')>"


class BankAccount(Base):
    """Bank account details."""

    __tablename__ = "bank_accounts"

    __encrypted_fields__ = _fields(
        EncryptedField("account_holder"),
        EncryptedField("account_number", fallback="****"),
        EncryptedField("ifsc"),
    )
    __plain_fields__: Tuple[str, ...] = ("bank_name", "branch", "account_type", "theme", "mmid", "vpa")

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    bank_name = Column(String(200), nullable=False)

    encrypted_account_holder = Column(Text, nullable=True)
    account_holder_iv = Column(String(32), nullable=True)

    encrypted_account_number = Column(Text, nullable=True)
    account_number_iv = Column(String(32), nullable=True)

    encrypted_ifsc = Column(Text, nullable=True)
    ifsc_iv = Column(String(32), nullable=True)

    branch = Column(String(200), nullable=True)
    account_type = Column(String(20), nullable=False, default="savings")
    theme = Column(String(50), nullable=True)
    mmid = Column(String(20), nullable=True)
    vpa = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<BankAccount(id={self.id}, bank_name='{self.bank_name}')>"


class Address(Base):
    """Postal address. Street, city and zip are encrypted; region fields are not."""

    __tablename__ = "addresses"

    __encrypted_fields__ = _fields(
        EncryptedField("line1"),
        EncryptedField("line2"),
        EncryptedField("city"),
        EncryptedField("zip_code"),
    )
    __plain_fields__: Tuple[str, ...] = ("label", "line3", "landmark", "state", "country")

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    label = Column(String(50), nullable=False)  # Home, Work, Other

    encrypted_line1 = Column(Text, nullable=True)
    line1_iv = Column(String(32), nullable=True)

    encrypted_line2 = Column(Text, nullable=True)
    line2_iv = Column(String(32), nullable=True)

    encrypted_city = Column(Text, nullable=True)
    city_iv = Column(String(32), nullable=True)

    encrypted_zip_code = Column(Text, nullable=True)
    zip_code_iv = Column(String(32), nullable=True)

    line3 = Column(String(255), nullable=True)
    landmark = Column(String(255), nullable=True)
    state = Column(String(100), nullable=False)
    country = Column(String(100), nullable=False)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Address(id={self.id}, label='{self.label}')>"
