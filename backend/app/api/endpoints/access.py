"""
Delegated access grant endpoints.

Admins and managers issue a grant; the link holder verifies it, edits the
target user's data while it is live, and may end it early by consuming it.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.database import get_db
from app.core.rate_limit import limiter, ACCESS_VERIFY_LIMIT
from app.models.user import User, ROLE_ADMIN, ROLE_MANAGER
from app.models.wallet import Address, BankAccount, Card
from app.services.auth_service import auth_service, require_roles
from app.services.sensitive_fields import SensitiveFieldCodec, get_sensitive_codec
from app.services.temp_access_service import temp_access_service
from app.services.wallet_service import wallet_service
from app.schemas.access import (
    ConsumeResponse,
    GrantPermissions,
    GrantRequest,
    GrantResponse,
    ProfileUpdate,
    TokenRequest,
    UpdateDataRequest,
    VerifyResponse,
)
from app.schemas.common import SuccessResponse
from app.schemas.wallet import AddressCreate, BankAccountCreate, CardCreate
from app.utils.exceptions import AccessDeniedError

router = APIRouter()

RECORD_TYPES = {
    "card": (Card, CardCreate),
    "bank": (BankAccount, BankAccountCreate),
    "address": (Address, AddressCreate),
}


@router.post("/grant", response_model=GrantResponse)
async def grant_access(
    payload: GrantRequest,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    db: AsyncSession = Depends(get_db)
):
    """Issue a time-boxed edit link for a user."""
    permissions = payload.permissions.as_flags() if payload.permissions else None
    grant, link = await temp_access_service.grant(
        db,
        user_id=payload.user_id,
        issued_by=current_user,
        type=payload.type,
        permissions=permissions,
    )
    return GrantResponse(token=grant.token, expires_at=grant.expires_at, link=link)


@router.post("/verify", response_model=VerifyResponse)
@limiter.limit(ACCESS_VERIFY_LIMIT)
async def verify_access(
    request: Request,
    payload: TokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """Check a link token without using it up."""
    result = await temp_access_service.verify(db, payload.token)
    if not result.valid:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"valid": False, "message": result.reason},
        )
    return VerifyResponse(
        valid=True,
        type=result.type,
        user_id=result.user_id,
        permissions=GrantPermissions.model_validate(result.permissions),
        expires_at=result.expires_at,
    )


@router.post("/consume", response_model=ConsumeResponse)
async def consume_access(
    payload: TokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """End a grant's session before it expires."""
    return ConsumeResponse(success=await temp_access_service.consume(db, payload.token))


@router.post("/update-data", response_model=SuccessResponse)
@limiter.limit(ACCESS_VERIFY_LIMIT)
async def update_data(
    request: Request,
    payload: UpdateDataRequest,
    codec: SensitiveFieldCodec = Depends(get_sensitive_codec),
    db: AsyncSession = Depends(get_db)
):
    """
    Change the grant holder's target data.

    ``profile`` edits username and email (needs edit permission); ``card``,
    ``bank`` and ``address`` add a new record (needs add permission).
    """
    action = "edit" if payload.type == "profile" else "add"
    try:
        grant = await temp_access_service.authorize_token(db, payload.token, action)
    except AccessDeniedError as e:
        logger.info(f"Rejected update-data ({payload.type}): {e.message}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    try:
        if payload.type == "profile":
            changes = ProfileUpdate.model_validate(payload.data)
        else:
            model, schema = RECORD_TYPES[payload.type]
            values = schema.model_validate(payload.data)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors(include_input=False, include_context=False))

    if payload.type == "profile":
        await _update_profile(db, grant.user_id, changes)
    else:
        record = await wallet_service.create_record(db, codec, model, grant.user_id, values.model_dump())
        logger.info(f"{model.__tablename__} {record.id} added for user {grant.user_id} by grant {grant.id}")

    return SuccessResponse(message="Data updated successfully")


async def _update_profile(db: AsyncSession, user_id, changes: ProfileUpdate) -> None:
    user = await auth_service.get_user_by_id(str(user_id), db)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    if changes.username and changes.username != user.username:
        if await auth_service.get_user_by_username(changes.username, db):
            raise HTTPException(status_code=400, detail="Username already exists")
        user.username = changes.username
    if changes.email and changes.email.lower() != user.email:
        if await auth_service.get_user_by_email(changes.email, db):
            raise HTTPException(status_code=400, detail="Email already exists")
        user.email = changes.email.lower()

    await db.commit()
    logger.info(f"Profile of user {user_id} updated via delegated access")
