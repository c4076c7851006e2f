"""
Persistence for wallet records (cards, bank accounts, addresses).

All field encryption goes through ``SensitiveFieldCodec``; this service only
scopes records to their owner and commits.
"""

from typing import Any, List, Mapping, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.models.wallet import Address, BankAccount, Card
from app.services.sensitive_fields import SensitiveFieldCodec
from app.utils.exceptions import RecordNotFoundError

Record = TypeVar("Record", Card, BankAccount, Address)

RECORD_LABELS = {Card: "Card", BankAccount: "Bank account", Address: "Address"}


class WalletService:
    """Owner-scoped CRUD over encrypted wallet records."""

    async def list_records(self, db: AsyncSession, model: Type[Record], user_id: UUID) -> List[Record]:
        result = await db.execute(
            select(model).where(model.user_id == user_id).order_by(model.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_record(self, db: AsyncSession, model: Type[Record], record_id: UUID, user_id: UUID) -> Record:
        """Fetch one record, treating another owner's record as missing."""
        record = await db.get(model, record_id)
        if record is None or record.user_id != user_id:
            raise RecordNotFoundError(RECORD_LABELS[model], str(record_id))
        return record

    async def create_record(
        self,
        db: AsyncSession,
        codec: SensitiveFieldCodec,
        model: Type[Record],
        user_id: UUID,
        values: Mapping[str, Any],
    ) -> Record:
        record = codec.apply(model(user_id=user_id), values)
        db.add(record)
        await db.commit()
        await db.refresh(record)
        logger.info(f"Created {RECORD_LABELS[model].lower()} {record.id} for user {user_id}")
        return record

    async def update_record(
        self,
        db: AsyncSession,
        codec: SensitiveFieldCodec,
        record: Record,
        values: Mapping[str, Any],
    ) -> Record:
        codec.apply(record, values)
        await db.commit()
        await db.refresh(record)
        return record

    async def delete_record(self, db: AsyncSession, record: Record) -> None:
        await db.delete(record)
        await db.commit()
        logger.info(f"Deleted {RECORD_LABELS[type(record)].lower()} {record.id}")


# Global instance for dependency injection
wallet_service = WalletService()
