"""
Common Pydantic schemas for API responses.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field
from datetime import datetime


class SuccessResponse(BaseModel):
    """
    Standard success response schema.

    Attributes:
        success: Whether the operation was successful
        message: Success message
        data: Optional response data
        timestamp: Response timestamp
    """
    success: bool = True
    message: str
    data: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ErrorDetail(BaseModel):
    """One failed field of a rejected request. Never carries the submitted value."""
    field: Optional[str] = None
    message: str
    type: Optional[str] = None


class ErrorResponse(BaseModel):
    """
    Standard error response schema.

    Attributes:
        error: Error type/name
        detail: Error message
        status_code: HTTP status code
        field: Field named by a domain validation error
        errors: List of detailed errors (for validation errors)
        correlation_id: Request correlation ID
    """
    error: str
    detail: str
    status_code: int
    field: Optional[str] = None
    errors: Optional[List[ErrorDetail]] = None
    correlation_id: Optional[str] = None
