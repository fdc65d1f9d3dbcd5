"""
Federated Login Use Case

Signs a user in with an identity provider ID token, creating the customer
account on first use.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError

from storeguard.app.services.audit_logger import AuditLogger
from storeguard.app.services.identity_verifier import (
    FederatedIdentity,
    IdentityProviderUnavailable,
    IdentityVerificationError,
    IIdentityVerifier,
)
from storeguard.app.services.token_service import TokenPair, TokenService
from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.domain.base import utcnow
from storeguard.domain.entities import AuditAction, User, UserRole, normalize_email
from storeguard.libs.result import Error, Result, Return
from .dtos import AuthResponse, UserInfo

logger = logging.getLogger(__name__)

INVALID_IDENTITY_TOKEN = Error("INVALID_TOKEN", "Invalid identity token")
PROVIDER_UNAVAILABLE = Error(
    "IDENTITY_PROVIDER_UNAVAILABLE", "Sign-in with this provider is currently unavailable"
)
ACCOUNT_PROVIDER_MISMATCH = Error(
    "ACCOUNT_PROVIDER_MISMATCH", "An account with this email uses a different sign-in method"
)


class FederatedLoginUseCase:
    """
    Use case for Google and Microsoft sign-in.

    Business Rules:
    - The ID token is verified by the provider's verifier before any store access
    - An account is found by (provider, subject) first, then by email
    - A federated account of the same provider that has no subject yet is linked
    - A local account, or one owned by another provider or subject, is never
      taken over; the caller must use that account's own sign-in method
    - Otherwise a customer is created with no password hash
    - Tokens are issued exactly as for password login
    """

    def __init__(self, uow: UnitOfWork, audit_logger: AuditLogger, verifier: IIdentityVerifier):
        self.uow = uow
        self.audit_logger = audit_logger
        self.verifier = verifier

    async def execute(self, id_token: str, client_ip: Optional[str] = None) -> Result[AuthResponse]:
        """
        Execute federated login use case.

        Errors:
            - INVALID_TOKEN: the ID token was rejected by the verifier
            - IDENTITY_PROVIDER_UNAVAILABLE: provider not configured or unreachable
            - ACCOUNT_PROVIDER_MISMATCH: email belongs to an account with another sign-in method
        """
        provider = self.verifier.provider.value

        try:
            identity = await self.verifier.verify(id_token)
        except IdentityProviderUnavailable as exc:
            logger.error(f"{provider} sign-in unavailable: {exc}")
            return Return.err(PROVIDER_UNAVAILABLE)
        except IdentityVerificationError as exc:
            logger.info(f"{provider} ID token rejected: {exc}")
            await self.audit_logger.record(
                AuditAction.login_failure,
                ip_address=client_ip,
                metadata={"provider": provider, "reason": "invalid_identity_token"},
            )
            return Return.err(INVALID_IDENTITY_TOKEN)

        email = normalize_email(identity.email)

        async with self.uow:
            user, created = await self._find_or_create(identity, email)
            if user is not None:
                tokens = await TokenService(self.uow).issue(user)
                user.last_login_at = utcnow()
                user = await self.uow.users.update(user)
                await self.uow.commit()

        if user is None:
            await self.audit_logger.record(
                AuditAction.login_failure,
                ip_address=client_ip,
                metadata={"email": email, "provider": provider, "reason": "provider_mismatch"},
            )
            return Return.err(ACCOUNT_PROVIDER_MISMATCH)

        if created:
            await self.audit_logger.record(
                AuditAction.user_registered,
                actor_id=user.id,
                ip_address=client_ip,
                entity="user",
                entity_id=str(user.id),
                metadata={"email": email, "provider": provider},
            )
        await self.audit_logger.record(
            AuditAction.login_success,
            actor_id=user.id,
            ip_address=client_ip,
            metadata={"email": email, "provider": provider},
        )

        return Return.ok(self._response(user, tokens))

    async def _find_or_create(
        self, identity: FederatedIdentity, email: str
    ) -> Tuple[Optional[User], bool]:
        """Returns (user, created); user is None when the email is held by another sign-in method."""
        user = await self.uow.users.get_by_provider_identity(identity.provider, identity.subject)
        if user is not None:
            return user, False

        user = await self.uow.users.get_by_email(email)
        if user is not None:
            if user.provider != identity.provider or user.provider_id is not None:
                return None, False
            user.provider_id = identity.subject
            return await self.uow.users.update(user), False

        user = User(
            email=email,
            password_hash=None,
            full_name=identity.full_name,
            provider=identity.provider,
            provider_id=identity.subject,
            role=UserRole.customer,
        )
        try:
            return await self.uow.users.create(user), True
        except IntegrityError:
            # Lost a race with a concurrent first sign-in of the same identity
            logger.info(f"Concurrent federated sign-up detected for {email}")
            await self.uow.rollback()
            user = await self.uow.users.get_by_provider_identity(
                identity.provider, identity.subject
            )
            return user, False

    @staticmethod
    def _response(user: User, tokens: TokenPair) -> AuthResponse:
        return AuthResponse(
            user=UserInfo(
                id=str(user.id),
                email=user.email,
                role=user.role.value,
                provider=user.provider.value,
                full_name=user.full_name,
            ),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )
