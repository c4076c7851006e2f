"""
Data formatting utilities.
"""

from typing import Any, Dict, Optional

from app.core.logging import get_correlation_id
from app.schemas.common import ErrorResponse


CARD_NUMBER_MASK = "**** **** ****"
CVV_MASK = "***"


def mask_card_number(last4: Optional[str]) -> Optional[str]:
    """
    Build the display form of a card number from its last four digits.

    Args:
        last4: Last four characters of the card number

    Returns:
        Masked string such as "**** **** **** 1111", or None when unknown
    """
    if not last4:
        return None
    return f"{CARD_NUMBER_MASK} {last4}"


def format_error_response(
    error: Exception,
    status_code: int = 500,
    expose_detail: bool = True,
) -> Dict[str, Any]:
    """
    Format error response for API.

    Args:
        error: Exception object
        status_code: HTTP status code
        expose_detail: When False the body only carries a generic message

    Returns:
        Formatted error response dictionary
    """
    if not expose_detail:
        body = ErrorResponse(
            error="InternalServerError",
            detail="An internal error occurred",
            status_code=status_code,
            correlation_id=get_correlation_id(),
        )
        return body.model_dump(exclude_none=True)

    body = ErrorResponse(
        error=error.__class__.__name__,
        detail=getattr(error, "detail", None) or getattr(error, "message", None) or str(error),
        status_code=status_code,
        field=getattr(error, "field", None),
        correlation_id=get_correlation_id(),
    )
    return body.model_dump(exclude_none=True)
