"""
Google implementation of IIdentityVerifier.

Verifies Google Sign-In ID tokens with google-auth against Google's
published certificates.
"""

import asyncio
import logging

from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from storeguard.app.services.identity_verifier import (
    FederatedIdentity,
    IdentityProviderUnavailable,
    IdentityVerificationError,
    IIdentityVerifier,
)
from storeguard.domain.entities import AuthProvider

logger = logging.getLogger(__name__)


class GoogleIdentityVerifier(IIdentityVerifier):
    provider = AuthProvider.google

    def __init__(self, client_id: str, timeout: float = 10.0):
        self.client_id = client_id
        self._timeout = timeout
        self._request = google_requests.Request()

    async def verify(self, token: str) -> FederatedIdentity:
        if not self.client_id:
            raise IdentityProviderUnavailable("Google sign-in is not configured")

        try:
            claims = await asyncio.wait_for(
                asyncio.to_thread(
                    id_token.verify_oauth2_token, token, self._request, self.client_id
                ),
                timeout=self._timeout,
            )
        except (google_exceptions.TransportError, asyncio.TimeoutError) as exc:
            logger.error(f"Could not fetch Google signing certificates: {exc.__class__.__name__}")
            raise IdentityProviderUnavailable("Google certificates unavailable") from exc
        except (ValueError, google_exceptions.GoogleAuthError) as exc:
            raise IdentityVerificationError(f"Google ID token rejected: {exc}") from exc

        # Unverified addresses could be used to claim someone else's account
        if claims.get("email_verified") not in (True, "true"):
            raise IdentityVerificationError("Google account email is not verified")

        if not claims.get("sub") or not claims.get("email"):
            raise IdentityVerificationError("Google ID token is missing sub or email")

        return FederatedIdentity(
            provider=self.provider,
            subject=claims["sub"],
            email=claims["email"],
            full_name=claims.get("name"),
        )
