"""
Tests for the temporary access grant service.
"""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy import select

from app.models.temp_access import TempAccessGrant
from app.services.temp_access_service import TempAccessService
from app.utils.exceptions import AccessDeniedError, RecordNotFoundError, ValidationError
from app.utils.helpers import utcnow
from tests.factories import create_test_user


@pytest.fixture
def service() -> TempAccessService:
    return TempAccessService(duration_minutes=15, retention_days=7, frontend_url="https://wallet.example/")


async def test_grant_issues_token_and_link(db_session, service):
    user = await create_test_user(db_session)

    grant, link = await service.grant(db_session, user.id)

    assert len(grant.token) == 64
    assert link == f"https://wallet.example/secure-edit?token={grant.token}"
    assert grant.used is False
    assert grant.permissions == {"canAdd": False, "canEdit": True, "canDelete": True}
    assert grant.duration_seconds == 15 * 60


async def test_grant_merges_permissions(db_session, service):
    user = await create_test_user(db_session)

    grant, _ = await service.grant(db_session, user.id, permissions={"canAdd": True, "canDelete": False})

    assert grant.permissions == {"canAdd": True, "canEdit": True, "canDelete": False}


async def test_grant_rejects_unknown_user_and_type(db_session, service):
    user = await create_test_user(db_session)

    with pytest.raises(RecordNotFoundError):
        await service.grant(db_session, uuid.uuid4())
    with pytest.raises(ValidationError):
        await service.grant(db_session, user.id, type="full_control")


async def test_verify_is_repeatable_within_window(db_session, service):
    user = await create_test_user(db_session)
    grant, _ = await service.grant(db_session, user.id)

    first = await service.verify(db_session, grant.token)
    second = await service.verify(db_session, grant.token)

    assert first.valid and second.valid
    assert first.user_id == user.id
    assert first.type == "edit_profile"

    await db_session.refresh(grant)
    assert grant.started_at is not None
    assert grant.used is False


async def test_verify_rejects_unknown_and_expired(db_session, service):
    user = await create_test_user(db_session)
    now = utcnow()
    grant, _ = await service.grant(db_session, user.id, now=now)

    assert (await service.verify(db_session, "")).reason == "Invalid link"
    assert (await service.verify(db_session, "f" * 64)).reason == "Invalid link"

    expired = await service.verify(db_session, grant.token, now=now + timedelta(minutes=15))
    assert expired.valid is False
    assert expired.reason == "Link has expired"


async def test_consume_ends_the_grant(db_session, service):
    user = await create_test_user(db_session)
    grant, _ = await service.grant(db_session, user.id)

    assert await service.consume(db_session, grant.token) is True
    assert await service.consume(db_session, grant.token) is True
    assert await service.consume(db_session, "f" * 64) is False

    result = await service.verify(db_session, grant.token)
    assert result.valid is False
    with pytest.raises(AccessDeniedError):
        await service.check_access(db_session, grant.token, user.id, "view")


async def test_check_access_enforces_capabilities(db_session, service):
    user = await create_test_user(db_session)
    grant, _ = await service.grant(db_session, user.id)

    assert (await service.check_access(db_session, grant.token, user.id, "view")).id == grant.id
    assert (await service.check_access(db_session, grant.token, user.id, "edit")).id == grant.id
    await service.check_access(db_session, grant.token, user.id, "delete")

    with pytest.raises(AccessDeniedError) as exc:
        await service.check_access(db_session, grant.token, user.id, "add")
    assert "add" in exc.value.message


async def test_check_access_binds_to_target_user(db_session, service):
    user = await create_test_user(db_session)
    other = await create_test_user(db_session, "other", "other@example.com")
    grant, _ = await service.grant(db_session, user.id)

    with pytest.raises(AccessDeniedError):
        await service.check_access(db_session, grant.token, other.id, "view")


async def test_check_access_rejects_missing_or_expired(db_session, service):
    user = await create_test_user(db_session)
    now = utcnow()
    grant, _ = await service.grant(db_session, user.id, now=now)

    with pytest.raises(AccessDeniedError):
        await service.check_access(db_session, "", user.id, "view")
    with pytest.raises(AccessDeniedError) as exc:
        await service.check_access(db_session, grant.token, user.id, "view", now=now + timedelta(hours=1))
    assert exc.value.message == "Access token expired"
    with pytest.raises(ValueError):
        await service.check_access(db_session, grant.token, user.id, "destroy")


async def test_authorize_token_uses_grant_owner(db_session, service):
    user = await create_test_user(db_session)
    grant, _ = await service.grant(db_session, user.id, permissions={"canAdd": True})

    authorized = await service.authorize_token(db_session, grant.token, "add")

    assert authorized.user_id == user.id
    with pytest.raises(AccessDeniedError):
        await service.authorize_token(db_session, "f" * 64, "add")


async def test_purge_stale_removes_old_grants(db_session, service):
    user = await create_test_user(db_session)
    now = utcnow()
    await service.grant(db_session, user.id, now=now - timedelta(days=8))
    fresh, _ = await service.grant(db_session, user.id, now=now)

    assert await service.purge_stale(db_session, now=now) == 1

    result = await db_session.execute(select(TempAccessGrant.id))
    assert result.scalars().all() == [fresh.id]
