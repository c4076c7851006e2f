"""
Test factories for creating test data.

Helpers taking a ``TestClient`` run inside the app's event loop through the
client's portal, against the app's own database.
"""

from datetime import timedelta
from typing import Any, Dict, Optional

from fastapi.testclient import TestClient
from sqlalchemy import update

from app.core.database import AsyncSessionLocal
from app.models.temp_access import TempAccessGrant
from app.models.user import User
from app.services.auth_service import auth_service
from app.services.temp_access_service import temp_access_service
from app.utils.helpers import utcnow

DEFAULT_PASSWORD = "testpassword123"

CARD_PAYLOAD = {
    "number": "4111 1111 1111 1111",
    "cvv": "123",
    "pin": "4321",
    "holder": "ALICE EXAMPLE",
    "expiry": "12/29",
    "bank": "Example Bank",
    "type": "visa",
    "theme": "midnight",
    "category": "credit",
}

BANK_PAYLOAD = {
    "bank_name": "Example Bank",
    "account_holder": "Alice Example",
    "account_number": "000123456789",
    "ifsc": "EXMP0001234",
    "branch": "Main Street",
    "account_type": "savings",
}

ADDRESS_PAYLOAD = {
    "label": "Home",
    "line1": "221B Baker Street",
    "line2": "Flat 2",
    "city": "London",
    "zip_code": "NW1 6XE",
    "state": "Greater London",
    "country": "UK",
}


async def create_test_user(
    db,
    username: str = "testuser",
    email: str = "test@example.com",
    password: str = DEFAULT_PASSWORD,
    role: str = "user",
    is_verified: bool = True,
) -> User:
    """Create a test user."""
    user, _ = await auth_service.create_user(
        username=username,
        email=email,
        password=password,
        db=db,
        role=role,
        is_verified=is_verified,
    )
    return user


def run(client: TestClient, fn, *args):
    """Run a coroutine function in the app's event loop."""
    return client.portal.call(fn, *args)


def seed_user(
    client: TestClient,
    username: str,
    email: str,
    role: str = "user",
    is_verified: bool = True,
    password: str = DEFAULT_PASSWORD,
) -> User:
    async def _seed():
        async with AsyncSessionLocal() as db:
            return await create_test_user(db, username, email, password, role, is_verified)

    return run(client, _seed)


def load_user(client: TestClient, user_id) -> Optional[User]:
    async def _load():
        async with AsyncSessionLocal() as db:
            return await db.get(User, user_id)

    return run(client, _load)


def auth_headers_for(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {auth_service.create_access_token(user.id)}"}


def issue_grant(
    client: TestClient,
    user: User,
    issued_by: Optional[User] = None,
    permissions: Optional[Dict[str, bool]] = None,
):
    """Issue a grant directly through the service. Returns (grant, link)."""

    async def _issue():
        async with AsyncSessionLocal() as db:
            return await temp_access_service.grant(db, user.id, issued_by=issued_by, permissions=permissions)

    return run(client, _issue)


def expire_grant(client: TestClient, token: str) -> None:
    """Move a grant's expiry into the past."""

    async def _expire():
        async with AsyncSessionLocal() as db:
            grant_expiry = utcnow() - timedelta(minutes=1)
            await db.execute(
                update(TempAccessGrant)
                .where(TempAccessGrant.token == token)
                .values(expires_at=grant_expiry)
            )
            await db.commit()

    run(client, _expire)


def execute(client: TestClient, statement) -> Any:
    async def _execute():
        async with AsyncSessionLocal() as db:
            result = await db.execute(statement)
            await db.commit()
            return result

    return run(client, _execute)


def find_user(client: TestClient, email: str) -> Optional[User]:
    async def _find():
        async with AsyncSessionLocal() as db:
            return await auth_service.get_user_by_email(email, db)

    return run(client, _find)
