"""
Wallet record endpoints.

``/cards``, ``/bank-accounts`` and ``/addresses`` serve the caller's own
records. ``/users/{user_id}/...`` serves another user's records to admins,
managers and holders of a delegated access token.
"""

from typing import Any, Dict, List, Type
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.database import get_db
from app.core.rate_limit import limiter, PIN_LIMIT
from app.models.user import User
from app.models.wallet import Address, BankAccount, Card
from app.services.access_gate import AccessContext, require_owner_access
from app.services.auth_service import get_current_user
from app.services.sensitive_fields import SensitiveFieldCodec, get_sensitive_codec
from app.services.wallet_service import wallet_service
from app.schemas.common import SuccessResponse
from app.schemas.wallet import (
    AddressCreate,
    AddressResponse,
    AddressUpdate,
    BankAccountCreate,
    BankAccountResponse,
    BankAccountUpdate,
    CardCreate,
    CardPinCheck,
    CardPinResult,
    CardResponse,
    CardReveal,
    CardUpdate,
)

router = APIRouter()


def _update_values(payload: BaseModel) -> Dict[str, Any]:
    # Omitted and null fields are left alone; an empty string clears an optional encrypted field
    return payload.model_dump(exclude_none=True)


def _register_own_routes(
    path: str,
    model: Type[Any],
    create_schema: Type[BaseModel],
    response_schema: Type[BaseModel],
) -> None:
    """List, create and delete routes over the caller's own records."""

    @router.get(path, response_model=List[response_schema], name=f"list_own_{model.__tablename__}")
    async def list_own(
        current_user: User = Depends(get_current_user),
        codec: SensitiveFieldCodec = Depends(get_sensitive_codec),
        db: AsyncSession = Depends(get_db),
    ):
        records = await wallet_service.list_records(db, model, current_user.id)
        return [codec.to_dict(record) for record in records]

    @router.post(
        path,
        response_model=response_schema,
        status_code=status.HTTP_201_CREATED,
        name=f"create_own_{model.__tablename__}",
    )
    async def create_own(
        payload: create_schema,
        current_user: User = Depends(get_current_user),
        codec: SensitiveFieldCodec = Depends(get_sensitive_codec),
        db: AsyncSession = Depends(get_db),
    ):
        record = await wallet_service.create_record(db, codec, model, current_user.id, payload.model_dump())
        return codec.to_dict(record)

    @router.delete(f"{path}/{{record_id}}", response_model=SuccessResponse, name=f"delete_own_{model.__tablename__}")
    async def delete_own(
        record_id: UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ):
        record = await wallet_service.get_record(db, model, record_id, current_user.id)
        await wallet_service.delete_record(db, record)
        return SuccessResponse(message="Deleted")


def _register_delegated_routes(
    path: str,
    model: Type[Any],
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    response_schema: Type[BaseModel],
) -> None:
    """View, add, edit and delete routes over ``user_id``'s records, gated per action."""
    base = f"/users/{{user_id}}{path}"
    table = model.__tablename__

    @router.get(base, response_model=List[response_schema], name=f"list_user_{table}")
    async def list_for_user(
        access: AccessContext = Depends(require_owner_access("view")),
        codec: SensitiveFieldCodec = Depends(get_sensitive_codec),
        db: AsyncSession = Depends(get_db),
    ):
        records = await wallet_service.list_records(db, model, access.owner_id)
        return [codec.to_dict(record) for record in records]

    @router.post(base, response_model=response_schema, status_code=status.HTTP_201_CREATED, name=f"add_user_{table}")
    async def add_for_user(
        payload: create_schema,
        access: AccessContext = Depends(require_owner_access("add")),
        codec: SensitiveFieldCodec = Depends(get_sensitive_codec),
        db: AsyncSession = Depends(get_db),
    ):
        record = await wallet_service.create_record(db, codec, model, access.owner_id, payload.model_dump())
        logger.info(f"{table} {record.id} added for user {access.owner_id} by {access.describe()}")
        return codec.to_dict(record)

    @router.put(f"{base}/{{record_id}}", response_model=response_schema, name=f"edit_user_{table}")
    async def edit_for_user(
        record_id: UUID,
        payload: update_schema,
        access: AccessContext = Depends(require_owner_access("edit")),
        codec: SensitiveFieldCodec = Depends(get_sensitive_codec),
        db: AsyncSession = Depends(get_db),
    ):
        record = await wallet_service.get_record(db, model, record_id, access.owner_id)
        record = await wallet_service.update_record(db, codec, record, _update_values(payload))
        logger.info(f"{table} {record.id} of user {access.owner_id} edited by {access.describe()}")
        return codec.to_dict(record)

    @router.delete(f"{base}/{{record_id}}", response_model=SuccessResponse, name=f"delete_user_{table}")
    async def delete_for_user(
        record_id: UUID,
        access: AccessContext = Depends(require_owner_access("delete")),
        db: AsyncSession = Depends(get_db),
    ):
        record = await wallet_service.get_record(db, model, record_id, access.owner_id)
        await wallet_service.delete_record(db, record)
        logger.info(f"{table} {record_id} of user {access.owner_id} deleted by {access.describe()}")
        return SuccessResponse(message="Deleted")


@router.post("/cards/{card_id}/verify-pin", response_model=CardPinResult)
@limiter.limit(PIN_LIMIT)
async def verify_card_pin(
    request: Request,
    card_id: UUID,
    payload: CardPinCheck,
    current_user: User = Depends(get_current_user),
    codec: SensitiveFieldCodec = Depends(get_sensitive_codec),
    db: AsyncSession = Depends(get_db),
):
    """Check a card's PIN without revealing anything."""
    card = await wallet_service.get_record(db, Card, card_id, current_user.id)
    return CardPinResult(valid=codec.verify_card_pin(card, payload.pin))


@router.post("/cards/{card_id}/reveal", response_model=CardReveal)
@limiter.limit(PIN_LIMIT)
async def reveal_card(
    request: Request,
    card_id: UUID,
    payload: CardPinCheck,
    current_user: User = Depends(get_current_user),
    codec: SensitiveFieldCodec = Depends(get_sensitive_codec),
    db: AsyncSession = Depends(get_db),
):
    """Return the full number, CVV and expiry after re-verifying the card PIN."""
    card = await wallet_service.get_record(db, Card, card_id, current_user.id)
    if not codec.verify_card_pin(card, payload.pin):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid PIN")
    logger.info(f"User {current_user.username} revealed card {card.id}")
    return CardReveal(**codec.reveal_card(card))


_register_own_routes("/cards", Card, CardCreate, CardResponse)
_register_own_routes("/bank-accounts", BankAccount, BankAccountCreate, BankAccountResponse)
_register_own_routes("/addresses", Address, AddressCreate, AddressResponse)

_register_delegated_routes("/cards", Card, CardCreate, CardUpdate, CardResponse)
_register_delegated_routes("/bank-accounts", BankAccount, BankAccountCreate, BankAccountUpdate, BankAccountResponse)
_register_delegated_routes("/addresses", Address, AddressCreate, AddressUpdate, AddressResponse)
