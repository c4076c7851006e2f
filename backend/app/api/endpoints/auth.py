"""
Authentication-related API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.database import get_db
from app.core.rate_limit import limiter, AUTH_LIMIT, PIN_LIMIT
from app.models.user import User, ROLE_MANAGER, ROLE_USER
from app.services.auth_service import auth_service, get_current_user, INVITE_DIGITS
from app.services.email_service import email_service
from app.schemas.auth import (
    BackupPayload,
    BackupResponse,
    ForgotPassword,
    ManagerSetup,
    OTPVerify,
    PasswordReset,
    PasswordVerify,
    PinResetWithPassword,
    PinSet,
    PinVerify,
    RegisterResponse,
    UserLogin,
    UserRegister,
    UserResponse,
    TokenResponse,
)
from app.schemas.common import SuccessResponse

router = APIRouter()

INVALID_CODE = "Invalid or expired code"


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=auth_service.create_access_token(user.id),
        token_type="bearer",
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_LIMIT)
async def register(
    request: Request,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register a new user and email a verification code."""
    try:
        user, code = await auth_service.create_user(
            username=user_data.username,
            email=user_data.email,
            password=user_data.password,
            db=db
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    await email_service.send_otp(user.email, code)
    return RegisterResponse(message="Verification code sent to your email", email=user.email)


@router.post("/verify-otp", response_model=TokenResponse)
@limiter.limit(AUTH_LIMIT)
async def verify_otp(
    request: Request,
    payload: OTPVerify,
    db: AsyncSession = Depends(get_db)
):
    """Confirm the emailed code, mark the account verified and log in."""
    user = await auth_service.get_user_by_email(payload.email, db)
    if not user or not auth_service.check_otp(user, payload.otp):
        raise HTTPException(status_code=400, detail=INVALID_CODE)

    user.is_verified = True
    auth_service.clear_otp(user)
    await auth_service.record_login(user, db)
    logger.info(f"User {user.username} verified their email")
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(AUTH_LIMIT)
async def login(
    request: Request,
    user_data: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login with username or email and return an access token."""
    user = await auth_service.authenticate_user(
        identifier=user_data.username,
        password=user_data.password,
        db=db
    )

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password"
        )

    if not user.is_verified:
        raise HTTPException(status_code=400, detail="Please verify your email before logging in")

    await auth_service.record_login(user, db)
    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information."""
    return UserResponse.model_validate(current_user)


@router.post("/set-pin", response_model=SuccessResponse)
async def set_pin(
    payload: PinSet,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Set the 4-digit app lock PIN the first time."""
    if current_user.has_pin:
        raise HTTPException(status_code=400, detail="PIN already set")
    await auth_service.set_pin(current_user, payload.pin, db)
    return SuccessResponse(message="PIN set")


@router.post("/verify-pin", response_model=SuccessResponse)
@limiter.limit(PIN_LIMIT)
async def verify_pin(
    request: Request,
    payload: PinVerify,
    current_user: User = Depends(get_current_user)
):
    """Check the app lock PIN."""
    if not auth_service.verify_pin(current_user, payload.pin):
        raise HTTPException(status_code=400, detail="Invalid PIN")
    return SuccessResponse(message="PIN verified")


@router.post("/reset-pin-with-password", response_model=SuccessResponse)
@limiter.limit(PIN_LIMIT)
async def reset_pin_with_password(
    request: Request,
    payload: PinResetWithPassword,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Replace a forgotten PIN after re-entering the account password."""
    if not auth_service.verify_password(payload.password, current_user.hashed_password):
        raise HTTPException(status_code=400, detail="Incorrect password")
    await auth_service.set_pin(current_user, payload.new_pin, db)
    return SuccessResponse(message="PIN reset")


@router.post("/verify-password", response_model=SuccessResponse)
@limiter.limit(PIN_LIMIT)
async def verify_password(
    request: Request,
    payload: PasswordVerify,
    current_user: User = Depends(get_current_user)
):
    """Re-authenticate before sensitive client-side actions."""
    if not auth_service.verify_password(payload.password, current_user.hashed_password):
        raise HTTPException(status_code=400, detail="Incorrect password")
    return SuccessResponse(message="Password verified")


@router.post("/forgot-password", response_model=SuccessResponse)
@limiter.limit(AUTH_LIMIT)
async def forgot_password(
    request: Request,
    payload: ForgotPassword,
    db: AsyncSession = Depends(get_db)
):
    """Email a reset code. The response does not reveal whether the email is registered."""
    user = await auth_service.get_user_by_email(payload.email, db)
    if user and user.is_active:
        code = auth_service.issue_otp(user)
        await db.commit()
        await email_service.send_otp(user.email, code, purpose="reset your password")
    return SuccessResponse(message="If the email is registered, a reset code has been sent")


@router.post("/reset-password", response_model=SuccessResponse)
@limiter.limit(AUTH_LIMIT)
async def reset_password(
    request: Request,
    payload: PasswordReset,
    db: AsyncSession = Depends(get_db)
):
    """Set a new password using an emailed reset code."""
    user = await auth_service.get_user_by_email(payload.email, db)
    if not user or not auth_service.check_otp(user, payload.otp):
        raise HTTPException(status_code=400, detail=INVALID_CODE)

    auth_service.clear_otp(user)
    await auth_service.update_password(user, payload.new_password, db)
    return SuccessResponse(message="Password reset successfully")


@router.post("/setup-manager", response_model=TokenResponse)
@limiter.limit(AUTH_LIMIT)
async def setup_manager(
    request: Request,
    payload: ManagerSetup,
    db: AsyncSession = Depends(get_db)
):
    """Accept a manager invitation with its 8-digit code."""
    user = await auth_service.get_user_by_email(payload.email, db)
    if not user or len(payload.otp) != INVITE_DIGITS or not auth_service.check_otp(user, payload.otp):
        raise HTTPException(status_code=400, detail=INVALID_CODE)
    if user.role != ROLE_USER:
        raise HTTPException(status_code=400, detail="User is already a Manager or Admin")

    user.role = ROLE_MANAGER
    auth_service.clear_otp(user)
    await auth_service.record_login(user, db)
    logger.info(f"User {user.username} accepted the manager invitation")
    return _token_response(user)


@router.get("/backup", response_model=BackupResponse)
async def get_backup(
    current_user: User = Depends(get_current_user)
):
    """Return the client-encrypted backup blob, if any."""
    return BackupResponse(data=current_user.encrypted_backup)


@router.post("/backup", response_model=SuccessResponse)
async def save_backup(
    payload: BackupPayload,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Store an opaque client-encrypted backup blob."""
    current_user.encrypted_backup = payload.data
    await db.commit()
    return SuccessResponse(message="Backup saved")