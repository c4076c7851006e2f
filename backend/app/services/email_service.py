"""
Outbound email for one-time codes and manager invitations.

The ``console`` backend only logs; ``brevo`` posts to the Brevo transactional
email API. Delivery failures are logged and reported as ``False``.
"""

from html import escape
from typing import Optional

import httpx
from loguru import logger

from app.core.config import settings


class EmailService:
    """Send transactional email through the configured backend."""

    def __init__(self):
        self.client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=10.0,
                headers={
                    "api-key": settings.BREVO_API_KEY or "",
                    "accept": "application/json",
                    "content-type": "application/json",
                },
            )
        return self.client

    async def close(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    async def send(self, to: str, subject: str, html: str) -> bool:
        """Send one message. Returns False on any delivery failure."""
        if settings.EMAIL_BACKEND == "console":
            logger.info(f"[email:console] to={to} subject={subject!r}")
            logger.debug(f"[email:console] body={html}")
            return True

        payload = {
            "sender": {"email": settings.EMAIL_SENDER, "name": settings.EMAIL_SENDER_NAME},
            "to": [{"email": to}],
            "subject": subject,
            "htmlContent": html,
        }
        try:
            response = await self._get_client().post(settings.BREVO_API_URL, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to send email '{subject}' to {to}: {e}")
            return False

        logger.info(f"Sent email '{subject}' to {to}")
        return True

    async def send_otp(self, to: str, code: str, purpose: str = "verify your email") -> bool:
        html = (
            f"<p>Your verification code is <strong>{code}</strong>.</p>"
            f"<p>Use it to {purpose}. It expires in {settings.OTP_EXPIRE_MINUTES} minutes.</p>"
        )
        return await self.send(to, "Your verification code", html)

    async def send_manager_invite(self, to: str, username: str, code: str) -> bool:
        html = (
            f"<p>Hello {escape(username)},</p>"
            f"<p>You have been invited to become a support manager. Your setup code is "
            f"<strong>{code}</strong>, valid for {settings.MANAGER_INVITE_EXPIRE_HOURS} hours.</p>"
            f"<p>Open {settings.FRONTEND_URL}/setup-manager to accept.</p>"
        )
        return await self.send(to, "Manager invitation", html)


# Global instance for dependency injection
email_service = EmailService()
