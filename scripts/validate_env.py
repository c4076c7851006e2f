#!/usr/bin/env python3
"""
Environment validation script for Secure Wallet.
Validates that all required environment variables are set correctly.
"""

import os
import re
import sys
from urllib.parse import urlparse

from dotenv import load_dotenv

OPTIONAL_VARS = [
    "FRONTEND_URL",
    "CORS_ORIGINS",
    "CELERY_BROKER_URL",
    "LOG_FILE",
]


def validate_url(url_string: str) -> bool:
    """Validate URL format."""
    try:
        result = urlparse(url_string)
        return all([result.scheme, result.netloc])
    except ValueError:
        return False


def check_database_url(database_url: str) -> bool:
    """Check the database URL format."""
    try:
        parsed = urlparse(database_url.replace("postgresql+asyncpg://", "postgresql://"))
    except ValueError:
        return False
    return parsed.scheme == "postgresql" and bool(parsed.hostname)


def check_redis_url(redis_url: str) -> bool:
    """Check the Redis URL format."""
    try:
        return urlparse(redis_url).scheme == "redis"
    except ValueError:
        return False


def required_vars_for_email_backend(email_backend: str) -> dict:
    base_required = {
        "DATABASE_URL": {
            "required": True,
            "validate": lambda v: v.startswith(("postgresql://", "postgresql+asyncpg://")),
            "error": "DATABASE_URL must start with postgresql:// or postgresql+asyncpg://",
        },
        "SECRET_KEY": {
            "required": True,
            "validate": lambda v: len(v) >= 32 and v != "your-secret-key-change-in-production",
            "error": "SECRET_KEY must be at least 32 characters and not the default value",
        },
        "ENCRYPTION_KEY": {
            "required": True,
            "validate": lambda v: re.fullmatch(r"[0-9a-fA-F]{64}", v) is not None,
            "error": "ENCRYPTION_KEY must be exactly 64 hex characters (run backend/scripts/generate_encryption_key.py)",
        },
        "EMAIL_BACKEND": {
            "required": False,
            "validate": lambda v: v in {"console", "brevo"},
            "error": "EMAIL_BACKEND must be 'console' or 'brevo'",
        },
    }

    if email_backend == "brevo":
        base_required.update(
            {
                "BREVO_API_KEY": {
                    "required": True,
                    "validate": lambda v: len(v.strip()) > 0,
                    "error": "BREVO_API_KEY must be set when EMAIL_BACKEND=brevo",
                },
                "EMAIL_SENDER": {
                    "required": True,
                    "validate": lambda v: "@" in v,
                    "error": "EMAIL_SENDER must be an email address",
                },
            }
        )

    return base_required


def main():
    """Main validation function."""
    print("🔍 Validating Environment Configuration")
    print("=" * 50)
    print()

    # Load environment from .env file if it exists
    env_file = os.path.join("backend", ".env")
    if os.path.exists(env_file):
        print(f"📄 Loading environment from {env_file}")
        load_dotenv(env_file)
    else:
        print(f"⚠️  {env_file} not found. Using system environment variables.")
    print()

    errors = []
    warnings = []

    email_backend = os.getenv("EMAIL_BACKEND", "console")
    required_vars = required_vars_for_email_backend(email_backend)

    # Check required variables
    print("Checking required environment variables...")
    for var_name, config in required_vars.items():
        value = os.getenv(var_name)

        if not value:
            if config["required"]:
                errors.append(f"❌ {var_name}: Not set (required)")
            continue

        if not config["validate"](value):
            errors.append(f"❌ {var_name}: {config.get('error', 'Invalid format')}")
        else:
            print(f"✅ {var_name}: Set and valid")

    print()

    # Check optional variables
    print("Checking optional environment variables...")
    for var_name in OPTIONAL_VARS:
        value = os.getenv(var_name)
        if value:
            print(f"✅ {var_name}: Set")
        else:
            print(f"⚪ {var_name}: Not set (optional)")

    print()

    print("Checking service URLs...")

    database_url = os.getenv("DATABASE_URL")
    if database_url:
        if check_database_url(database_url):
            print("✅ Database URL format is valid")
        else:
            warnings.append("⚠️  Database URL format may be invalid")

    broker_url = os.getenv("CELERY_BROKER_URL")
    if broker_url:
        if check_redis_url(broker_url):
            print("✅ Celery broker URL format is valid")
        else:
            warnings.append("⚠️  Celery broker URL format may be invalid")

    frontend_url = os.getenv("FRONTEND_URL")
    if frontend_url and not validate_url(frontend_url):
        warnings.append("⚠️  FRONTEND_URL is not a valid URL; access links will be broken")

    print()

    # Summary
    print("=" * 50)
    if errors:
        print("❌ Validation failed with the following errors:")
        for error in errors:
            print(f"  {error}")
        print()
        return 1

    if warnings:
        print("⚠️  Validation passed with warnings:")
        for warning in warnings:
            print(f"  {warning}")
        print()

    print("✅ Environment validation passed!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
