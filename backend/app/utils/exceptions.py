"""
Custom exception classes for the Secure Wallet application.
"""

from typing import Optional


class WalletException(Exception):
    """Base exception for all Secure Wallet errors."""

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(self.message)


class ConfigurationError(WalletException):
    """Raised when the process is misconfigured (e.g. a malformed encryption key)."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(f"Configuration error: {message}", detail)


class DecryptionError(WalletException):
    """Raised when a stored field cannot be decrypted."""

    def __init__(self, message: str = "Unable to decrypt value", detail: Optional[str] = None):
        super().__init__(message, detail)


class RecordNotFoundError(WalletException):
    """Raised when a requested record does not exist."""

    def __init__(self, record_type: str, record_id: str, detail: Optional[str] = None):
        message = f"{record_type} not found: {record_id}"
        super().__init__(message, detail)
        self.record_type = record_type
        self.record_id = record_id


class AuthenticationError(WalletException):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed", detail: Optional[str] = None):
        super().__init__(message, detail)


class AccessDeniedError(WalletException):
    """Raised when an authenticated or anonymous requester may not perform an action."""

    def __init__(self, message: str = "Access denied", detail: Optional[str] = None):
        super().__init__(message, detail)


class ValidationError(WalletException):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, detail: Optional[str] = None):
        if field:
            message = f"Validation error for field '{field}': {message}"
        super().__init__(message, detail)
        self.field = field
