"""
HTTP mail API implementation of IEmailSender.

Posts a JSON message to a transactional mail provider.
"""

import logging
from datetime import datetime
from typing import Optional

import httpx

from storeguard.app.services.email_sender import EmailDeliveryError, IEmailSender

logger = logging.getLogger(__name__)

PASSWORD_RESET_SUBJECT = "Reset your password"


def render_password_reset_body(reset_link: str, expires_at: datetime) -> str:
    return (
        "We received a request to reset your password.\n\n"
        f"Use the link below to choose a new one. It expires at {expires_at:%Y-%m-%d %H:%M} UTC "
        "and can only be used once.\n\n"
        f"{reset_link}\n\n"
        "If you did not ask for this, you can ignore this email."
    )


class HttpEmailSender(IEmailSender):
    def __init__(
        self,
        api_url: str,
        api_token: str,
        from_address: str,
        from_name: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.api_url = api_url
        self.api_token = api_token
        self.from_address = from_address
        self.from_name = from_name
        self._client = client
        self._timeout = timeout

    async def _post(self, payload: dict) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self.api_token}"}
        if self._client is not None:
            return await self._client.post(self.api_url, json=payload, headers=headers)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(self.api_url, json=payload, headers=headers)

    async def send_password_reset_email(
        self, email: str, reset_link: str, expires_at: datetime
    ) -> None:
        payload = {
            "from": {"address": self.from_address, "name": self.from_name},
            "to": [{"address": email}],
            "subject": PASSWORD_RESET_SUBJECT,
            "text": render_password_reset_body(reset_link, expires_at),
        }
        try:
            response = await self._post(payload)
        except httpx.HTTPError as exc:
            raise EmailDeliveryError(f"Mail API request failed: {exc.__class__.__name__}") from exc

        if response.status_code >= 400:
            raise EmailDeliveryError(f"Mail API responded with {response.status_code}")

        logger.info(f"Password reset email handed off for {email}")


class LoggingEmailSender(IEmailSender):
    """Used when no mail API is configured. Never logs the link itself."""

    async def send_password_reset_email(
        self, email: str, reset_link: str, expires_at: datetime
    ) -> None:
        logger.warning(f"Mail delivery is not configured; password reset email for {email} dropped")
