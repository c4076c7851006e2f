"""
Encrypted entity accessors.

``SensitiveFieldCodec`` is the only code that reads or writes the
``encrypted_<field>`` / ``<field>_iv`` column pairs declared by wallet models.
It turns plain payloads into stored columns and stored columns back into
client-facing dicts, so ciphertext and IVs never cross the API boundary.
"""

import hmac
from typing import Any, Dict, Mapping, Optional

from fastapi import Depends, Request
from loguru import logger

from app.models.wallet import Address, BankAccount, Card, EncryptedField
from app.services.field_cipher import EncryptedValue, FieldCipher
from app.utils.exceptions import DecryptionError
from app.utils.formatters import CVV_MASK, mask_card_number


class SensitiveFieldCodec:
    """Encrypt-on-write / decrypt-on-read for wallet records."""

    def __init__(self, cipher: FieldCipher):
        self.cipher = cipher

    @staticmethod
    def _spec(record: Any, field: str) -> EncryptedField:
        specs = getattr(type(record), "__encrypted_fields__", {})
        try:
            return specs[field]
        except KeyError:
            raise KeyError(f"{type(record).__name__} has no encrypted field '{field}'") from None

    def set_field(self, record: Any, field: str, value: Optional[str]) -> None:
        """
        Encrypt ``value`` into the record's column pair.

        ``None`` or an empty string clears both columns: the field is unset,
        not an encrypted empty string.
        """
        spec = self._spec(record, field)
        if value is None or value == "":
            setattr(record, spec.content_attr, None)
            setattr(record, spec.iv_attr, None)
            return

        encrypted = self.cipher.encrypt(str(value))
        setattr(record, spec.content_attr, encrypted.content)
        setattr(record, spec.iv_attr, encrypted.iv)

    def get_field(self, record: Any, field: str) -> Optional[str]:
        """
        Decrypt one field.

        Returns None when either stored column is missing, and the field's
        fallback string when decryption fails.
        """
        spec = self._spec(record, field)
        content = getattr(record, spec.content_attr, None)
        iv = getattr(record, spec.iv_attr, None)
        if not content or not iv:
            return None

        try:
            return self.cipher.decrypt(EncryptedValue(iv=iv, content=content))
        except DecryptionError as e:
            logger.warning(
                f"Failed to decrypt {type(record).__name__}.{field} "
                f"for record {getattr(record, 'id', None)}: {e.message}"
            )
            return spec.fallback

    def has_field(self, record: Any, field: str) -> bool:
        spec = self._spec(record, field)
        return bool(getattr(record, spec.content_attr, None) and getattr(record, spec.iv_attr, None))

    def apply(self, record: Any, values: Mapping[str, Any]) -> Any:
        """Copy a plain payload onto a record, encrypting declared fields."""
        encrypted = getattr(type(record), "__encrypted_fields__", {})
        plain = getattr(type(record), "__plain_fields__", ())
        for key, value in values.items():
            if isinstance(record, Card) and key == "number":
                self.set_card_number(record, value)
            elif key in encrypted:
                self.set_field(record, key, value)
            elif key in plain:
                setattr(record, key, value)
        return record

    # Cards

    def set_card_number(self, card: Card, number: Optional[str]) -> None:
        """Encrypt the card number and keep its last four characters in the clear."""
        if number:
            number = "".join(str(number).split())
        self.set_field(card, "number", number)
        card.last4 = number[-4:] if number else None

    def masked_number(self, card: Card) -> Optional[str]:
        """Display form of the card number; never decrypts."""
        return mask_card_number(card.last4)

    def masked_cvv(self, card: Card) -> Optional[str]:
        return CVV_MASK if self.has_field(card, "cvv") else None

    def verify_card_pin(self, card: Card, pin: str) -> bool:
        """Compare a submitted PIN with the stored one in constant time."""
        if not self.has_field(card, "pin"):
            return False
        spec = self._spec(card, "pin")
        try:
            stored = self.cipher.decrypt(
                EncryptedValue(iv=getattr(card, spec.iv_attr), content=getattr(card, spec.content_attr))
            )
        except DecryptionError:
            logger.warning(f"Card {card.id} has an undecryptable PIN; refusing verification")
            return False
        return hmac.compare_digest(stored.encode("utf-8"), str(pin).encode("utf-8"))

    def reveal_card(self, card: Card) -> Dict[str, Optional[str]]:
        """Plaintext number, CVV and expiry. Callers must have re-verified the PIN."""
        return {
            "number": self.get_field(card, "number"),
            "cvv": self.get_field(card, "cvv"),
            "expiry": self.get_field(card, "expiry"),
        }

    # Serialization

    def card_to_dict(self, card: Card) -> Dict[str, Any]:
        return {
            "id": card.id,
            "user_id": card.user_id,
            "number": self.masked_number(card),
            "last4": card.last4,
            "cvv": self.masked_cvv(card),
            "holder": self.get_field(card, "holder"),
            "expiry": self.get_field(card, "expiry"),
            "bank": self.get_field(card, "bank"),
            "has_pin": self.has_field(card, "pin"),
            "type": card.type,
            "theme": card.theme,
            "category": card.category,
            "image": card.image,
            "created_at": card.created_at,
        }

    def bank_account_to_dict(self, account: BankAccount) -> Dict[str, Any]:
        return {
            "id": account.id,
            "user_id": account.user_id,
            "bank_name": account.bank_name,
            "account_holder": self.get_field(account, "account_holder"),
            "account_number": self.get_field(account, "account_number"),
            "ifsc": self.get_field(account, "ifsc"),
            "branch": account.branch,
            "account_type": account.account_type,
            "theme": account.theme,
            "mmid": account.mmid,
            "vpa": account.vpa,
            "created_at": account.created_at,
        }

    def address_to_dict(self, address: Address) -> Dict[str, Any]:
        return {
            "id": address.id,
            "user_id": address.user_id,
            "label": address.label,
            "line1": self.get_field(address, "line1"),
            "line2": self.get_field(address, "line2"),
            "line3": address.line3,
            "landmark": address.landmark,
            "city": self.get_field(address, "city"),
            "state": address.state,
            "zip_code": self.get_field(address, "zip_code"),
            "country": address.country,
            "created_at": address.created_at,
        }

    def to_dict(self, record: Any) -> Dict[str, Any]:
        if isinstance(record, Card):
            return self.card_to_dict(record)
        if isinstance(record, BankAccount):
            return self.bank_account_to_dict(record)
        if isinstance(record, Address):
            return self.address_to_dict(record)
        raise TypeError(f"Unsupported record type: {type(record).__name__}")


def get_field_cipher(request: Request) -> FieldCipher:
    """Dependency returning the process-wide cipher built at startup."""
    return request.app.state.field_cipher


def get_sensitive_codec(cipher: FieldCipher = Depends(get_field_cipher)) -> SensitiveFieldCodec:
    """Dependency for the record codec."""
    return SensitiveFieldCodec(cipher)
