"""
Utility modules for the Secure Wallet application.
"""

from .exceptions import (
    WalletException,
    ConfigurationError,
    DecryptionError,
    RecordNotFoundError,
    AuthenticationError,
    AccessDeniedError,
    ValidationError,
)

__all__ = [
    "WalletException",
    "ConfigurationError",
    "DecryptionError",
    "RecordNotFoundError",
    "AuthenticationError",
    "AccessDeniedError",
    "ValidationError",
]
