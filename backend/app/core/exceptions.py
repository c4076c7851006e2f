"""
Global exception handlers for FastAPI application.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from loguru import logger
from sqlalchemy.exc import TimeoutError as SQLAlchemyTimeoutError

from app.core.logging import get_correlation_id, log_error
from app.utils.exceptions import (
    WalletException,
    ConfigurationError,
    DecryptionError,
    RecordNotFoundError,
    AuthenticationError,
    AccessDeniedError,
    ValidationError as CustomValidationError,
)
from app.schemas.common import ErrorDetail, ErrorResponse
from app.utils.formatters import format_error_response


async def wallet_exception_handler(request: Request, exc: WalletException) -> JSONResponse:
    """Handle custom wallet exceptions."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    expose_detail = True

    # Map exception types to status codes
    if isinstance(exc, RecordNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, AuthenticationError):
        status_code = status.HTTP_401_UNAUTHORIZED
    elif isinstance(exc, AccessDeniedError):
        status_code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, CustomValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, (DecryptionError, ConfigurationError)):
        expose_detail = False

    error_response = format_error_response(exc, status_code, expose_detail=expose_detail)

    if status_code >= 500:
        logger.opt(exception=exc).error(f"Wallet exception: {exc.message}")
    else:
        logger.warning(f"Wallet exception ({status_code}): {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content=error_response
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors."""
    errors = [
        ErrorDetail(
            field=".".join(str(loc) for loc in error.get("loc", [])),
            message=error.get("msg", ""),
            type=error.get("type"),
        )
        for error in exc.errors()
    ]

    error_response = ErrorResponse(
        error="ValidationError",
        detail="Request validation failed",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        errors=errors,
        correlation_id=get_correlation_id(),
    ).model_dump(exclude_none=True)

    # Field names only; submitted values may be card numbers
    logger.warning(f"Validation error on fields: {[e.field for e in errors]}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle generic exceptions."""
    if isinstance(exc, SQLAlchemyTimeoutError):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=ErrorResponse(
                error="ServiceUnavailable",
                detail="Database is busy (connection pool exhausted). Please retry in a moment.",
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                correlation_id=get_correlation_id(),
            ).model_dump(exclude_none=True),
            headers={"Retry-After": "3"},
        )

    log_error(exc, {"path": request.url.path, "method": request.method})

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=format_error_response(exc, status.HTTP_500_INTERNAL_SERVER_ERROR, expose_detail=False)
    )
