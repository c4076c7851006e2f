"""
Tests for outbound email delivery.
"""

import json

import httpx
import pytest

from app.core import config
from app.services.email_service import EmailService


@pytest.fixture
def brevo(monkeypatch):
    monkeypatch.setattr(config.settings, "EMAIL_BACKEND", "brevo")
    monkeypatch.setattr(config.settings, "BREVO_API_URL", "https://mail.test/v3/smtp/email")


async def test_console_backend_does_not_send():
    service = EmailService()

    assert await service.send_otp("alice@example.com", "123456") is True
    assert service.client is None


async def test_brevo_posts_message(brevo):
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        return httpx.Response(201, json={"messageId": "abc"})

    service = EmailService()
    service.client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    assert await service.send_manager_invite("bob@example.com", "bob", "12345678") is True
    await service.close()

    assert sent[0]["to"] == [{"email": "bob@example.com"}]
    assert "12345678" in sent[0]["htmlContent"]
    assert service.client is None


async def test_brevo_failure_returns_false(brevo):
    service = EmailService()
    service.client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(500))
    )

    assert await service.send_otp("bob@example.com", "654321") is False
    await service.close()


async def test_manager_invite_escapes_username(brevo):
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        return httpx.Response(201, json={"messageId": "abc"})

    service = EmailService()
    service.client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    username = '<script>alert("x")</script>'
    assert await service.send_manager_invite("eve@example.com", username, "12345678") is True
    await service.close()

    body = sent[0]["htmlContent"]
    assert "<script>" not in body
    assert "&lt;script&gt;alert(&quot;x&quot;)&lt;/script&gt;" in body
