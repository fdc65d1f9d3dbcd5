"""
Microsoft identity platform implementation of IIdentityVerifier.

Verifies v2.0 ID tokens with python-jose against the tenant's published
signing keys, fetched with httpx and cached.
"""

import logging
import time
from typing import Optional

import httpx
from jose import JWTError, jwt

from storeguard.app.services.identity_verifier import (
    FederatedIdentity,
    IdentityProviderUnavailable,
    IdentityVerificationError,
    IIdentityVerifier,
)
from storeguard.domain.entities import AuthProvider

logger = logging.getLogger(__name__)

AUTHORITY = "https://login.microsoftonline.com"
# Tenant aliases that accept accounts from any directory
MULTI_TENANT_ALIASES = {"common", "organizations", "consumers"}
KEYS_TTL_SECONDS = 3600


class MicrosoftIdentityVerifier(IIdentityVerifier):
    provider = AuthProvider.microsoft

    def __init__(
        self,
        client_id: str,
        tenant_id: str = "common",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.client_id = client_id
        self.tenant_id = tenant_id
        self.jwks_url = f"{AUTHORITY}/{tenant_id}/discovery/v2.0/keys"
        self._client = client
        self._timeout = timeout
        self._keys: list = []
        self._keys_fetched_at: Optional[float] = None

    async def _get(self) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(self.jwks_url)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.get(self.jwks_url)

    async def _signing_keys(self, refresh: bool = False) -> list:
        fresh = (
            self._keys_fetched_at is not None
            and time.monotonic() - self._keys_fetched_at < KEYS_TTL_SECONDS
        )
        if fresh and not refresh:
            return self._keys

        try:
            response = await self._get()
            response.raise_for_status()
            self._keys = response.json()["keys"]
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.error(f"Could not fetch Microsoft signing keys: {exc.__class__.__name__}")
            raise IdentityProviderUnavailable("Microsoft signing keys unavailable") from exc

        self._keys_fetched_at = time.monotonic()
        return self._keys

    async def _find_key(self, kid: Optional[str]) -> Optional[dict]:
        for refresh in (False, True):
            # A kid we have not seen may be a rotated key
            for key in await self._signing_keys(refresh=refresh):
                if key.get("kid") == kid:
                    return key
        return None

    def _expected_issuer(self, claims: dict) -> str:
        tenant = self.tenant_id
        if tenant in MULTI_TENANT_ALIASES:
            tenant = claims.get("tid", "")
        return f"{AUTHORITY}/{tenant}/v2.0"

    async def verify(self, token: str) -> FederatedIdentity:
        if not self.client_id:
            raise IdentityProviderUnavailable("Microsoft sign-in is not configured")

        try:
            header = jwt.get_unverified_header(token)
        except JWTError as exc:
            raise IdentityVerificationError("Microsoft ID token is malformed") from exc

        key = await self._find_key(header.get("kid"))
        if key is None:
            raise IdentityVerificationError("Microsoft ID token signed with an unknown key")

        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=["RS256"],
                audience=self.client_id,
                options={"verify_at_hash": False},
            )
        except JWTError as exc:
            raise IdentityVerificationError(f"Microsoft ID token rejected: {exc}") from exc

        if not claims.get("tid") or claims.get("iss") != self._expected_issuer(claims):
            raise IdentityVerificationError("Microsoft ID token has an unexpected issuer")

        subject = claims.get("sub") or claims.get("oid")
        email = claims.get("email") or claims.get("preferred_username")
        if not subject or not email:
            raise IdentityVerificationError("Microsoft ID token is missing sub or email")

        return FederatedIdentity(
            provider=self.provider,
            subject=subject,
            email=email,
            full_name=claims.get("name"),
        )
