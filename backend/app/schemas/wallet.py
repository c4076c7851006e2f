"""
Wallet record schemas.

Response models hold only decrypted or masked values; stored ciphertext and
IV columns have no counterpart here.
"""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID
from pydantic import BaseModel, Field, field_validator

CardCategory = Literal["credit", "debit", "forex", "identity"]
AccountType = Literal["savings", "current"]


def _normalize_card_number(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    compact = "".join(value.split())
    if len(compact) < 4:
        raise ValueError("Card number must have at least 4 non-space characters")
    return compact


class CardBase(BaseModel):
    holder: Optional[str] = Field(None, max_length=100)
    expiry: Optional[str] = Field(None, max_length=10)
    bank: Optional[str] = Field(None, max_length=100)
    type: str = Field(..., min_length=1, max_length=50)
    theme: str = Field(..., min_length=1, max_length=50)
    category: CardCategory = "credit"
    image: Optional[str] = None


class CardCreate(CardBase):
    number: str = Field(..., min_length=4, max_length=30)
    cvv: Optional[str] = Field(None, pattern=r"^\d{3,4}$")
    pin: Optional[str] = Field(None, pattern=r"^\d{4,6}$")

    @field_validator("number")
    @classmethod
    def normalize_number(cls, value: Optional[str]) -> Optional[str]:
        return _normalize_card_number(value)


class CardUpdate(BaseModel):
    number: Optional[str] = Field(None, min_length=4, max_length=30)
    # Empty string clears the stored value
    cvv: Optional[str] = Field(None, pattern=r"^(\d{3,4})?$")
    pin: Optional[str] = Field(None, pattern=r"^(\d{4,6})?$")
    holder: Optional[str] = Field(None, max_length=100)
    expiry: Optional[str] = Field(None, max_length=10)
    bank: Optional[str] = Field(None, max_length=100)
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    theme: Optional[str] = Field(None, min_length=1, max_length=50)
    category: Optional[CardCategory] = None
    image: Optional[str] = None

    @field_validator("number")
    @classmethod
    def normalize_number(cls, value: Optional[str]) -> Optional[str]:
        return _normalize_card_number(value)


class CardResponse(BaseModel):
    """Card as shown to clients: number and CVV are masked."""
    id: UUID
    user_id: UUID
    number: Optional[str]
    last4: Optional[str]
    cvv: Optional[str]
    holder: Optional[str]
    expiry: Optional[str]
    bank: Optional[str]
    has_pin: bool
    type: str
    theme: str
    category: str
    image: Optional[str]
    created_at: Optional[datetime]


class CardPinCheck(BaseModel):
    pin: str = Field(..., min_length=4, max_length=6)


class CardPinResult(BaseModel):
    valid: bool


class CardReveal(BaseModel):
    number: Optional[str]
    cvv: Optional[str]
    expiry: Optional[str]


class BankAccountBase(BaseModel):
    bank_name: str = Field(..., min_length=1, max_length=100)
    branch: Optional[str] = Field(None, max_length=100)
    account_type: AccountType = "savings"
    theme: Optional[str] = Field(None, max_length=30)
    mmid: Optional[str] = Field(None, max_length=20)
    vpa: Optional[str] = Field(None, max_length=100)


class BankAccountCreate(BankAccountBase):
    account_holder: str = Field(..., min_length=1, max_length=100)
    account_number: str = Field(..., min_length=4, max_length=34)
    ifsc: Optional[str] = Field(None, max_length=20)


class BankAccountUpdate(BaseModel):
    bank_name: Optional[str] = Field(None, min_length=1, max_length=100)
    account_holder: Optional[str] = Field(None, max_length=100)
    account_number: Optional[str] = Field(None, min_length=4, max_length=34)
    ifsc: Optional[str] = Field(None, max_length=20)
    branch: Optional[str] = Field(None, max_length=100)
    account_type: Optional[AccountType] = None
    theme: Optional[str] = Field(None, max_length=30)
    mmid: Optional[str] = Field(None, max_length=20)
    vpa: Optional[str] = Field(None, max_length=100)


class BankAccountResponse(BaseModel):
    id: UUID
    user_id: UUID
    bank_name: str
    account_holder: Optional[str]
    account_number: Optional[str]
    ifsc: Optional[str]
    branch: Optional[str]
    account_type: str
    theme: Optional[str]
    mmid: Optional[str]
    vpa: Optional[str]
    created_at: Optional[datetime]


class AddressBase(BaseModel):
    line3: Optional[str] = Field(None, max_length=255)
    landmark: Optional[str] = Field(None, max_length=255)


class AddressCreate(AddressBase):
    label: str = Field(..., min_length=1, max_length=50)
    state: str = Field(..., min_length=1, max_length=100)
    country: str = Field(..., min_length=1, max_length=100)
    line1: str = Field(..., min_length=1, max_length=200)
    line2: Optional[str] = Field(None, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)


class AddressUpdate(AddressBase):
    label: Optional[str] = Field(None, min_length=1, max_length=50)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    country: Optional[str] = Field(None, min_length=1, max_length=100)
    line1: Optional[str] = Field(None, min_length=1, max_length=200)
    line2: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    zip_code: Optional[str] = Field(None, min_length=1, max_length=20)


class AddressResponse(BaseModel):
    id: UUID
    user_id: UUID
    label: str
    line1: Optional[str]
    line2: Optional[str]
    line3: Optional[str]
    landmark: Optional[str]
    city: Optional[str]
    state: Optional[str]
    zip_code: Optional[str]
    country: Optional[str]
    created_at: Optional[datetime]
