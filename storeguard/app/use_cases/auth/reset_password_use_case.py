"""
Reset Password Use Case

Consumes a password reset token and sets a new password.
"""

import logging
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from storeguard.app.services.audit_logger import AuditLogger
from storeguard.app.services.passwords import (
    MAX_PASSWORD_BYTES,
    MIN_PASSWORD_LENGTH,
    hash_password,
    password_too_long,
)
from storeguard.app.services.rate_limiter import RATE_LIMITED_ERROR, RateLimiter, RouteClass
from storeguard.app.services.token_service import TokenService
from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.domain.base import utcnow
from storeguard.domain.entities import AuditAction
from storeguard.libs.result import Error, Result, Return
from .dtos import RESET_PASSWORD_MESSAGE, MessageResponse
from .forgot_password_use_case import hash_reset_token

logger = logging.getLogger(__name__)

INVALID_OR_EXPIRED = Error("INVALID_OR_EXPIRED_TOKEN", "Invalid or expired reset token")
ALREADY_USED = Error("TOKEN_ALREADY_USED", "Reset token has already been used")


class ResetPasswordUseCase:
    """
    Use case for completing a password reset.

    Business Rules:
    - Rate limited per client before any hashing or store access
    - New password must be at least 8 characters and at most 72 bytes
    - Unknown, expired and ineligible tokens share one error; a used token
      gets its own
    - A token is consumed by a conditional update, so of several concurrent
      attempts exactly one succeeds
    - Password change, token consumption and refresh token revocation are
      committed together
    """

    def __init__(self, uow: UnitOfWork, audit_logger: AuditLogger, rate_limiter: RateLimiter):
        self.uow = uow
        self.audit_logger = audit_logger
        self.rate_limiter = rate_limiter

    def _validate_password(self, password: str) -> Result[None]:
        if len(password) < MIN_PASSWORD_LENGTH:
            return Return.err(
                Error(
                    "INVALID_PASSWORD",
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
                )
            )
        if password_too_long(password):
            return Return.err(
                Error(
                    "INVALID_PASSWORD",
                    f"Password must be at most {MAX_PASSWORD_BYTES} bytes long",
                )
            )
        return Return.ok(None)

    async def execute(
        self, token: str, new_password: str, client_ip: Optional[str] = None
    ) -> Result[MessageResponse]:
        """
        Execute reset password use case.

        Errors:
            - RATE_LIMITED: too many attempts from this client
            - INVALID_PASSWORD: password does not meet complexity requirements
            - INVALID_OR_EXPIRED_TOKEN: unknown, expired or ineligible token
            - TOKEN_ALREADY_USED: token was consumed before
        """
        if not self.rate_limiter.allow(RouteClass.reset_password, client_ip):
            return Return.err(RATE_LIMITED_ERROR)

        validation = self._validate_password(new_password)
        if validation.is_err():
            return Return.err(validation.error)

        result, reason, user_id = await self._consume(hash_reset_token(token), new_password)

        if result.is_err():
            await self.audit_logger.record(
                AuditAction.password_reset_failed,
                actor_id=user_id,
                ip_address=client_ip,
                metadata={"reason": reason},
            )
            return result

        await self.audit_logger.record(
            AuditAction.password_reset_success,
            actor_id=user_id,
            ip_address=client_ip,
            entity="user",
            entity_id=str(user_id),
        )
        logger.info(f"Password reset completed for user {user_id}")
        return result

    async def _consume(
        self, token_hash: str, new_password: str
    ) -> Tuple[Result[MessageResponse], Optional[str], Optional[UUID]]:
        """Returns (result, failure reason, user id)."""
        async with self.uow:
            try:
                reset_token = await self.uow.password_reset_tokens.get_by_token_hash(token_hash)
            except SQLAlchemyError as exc:
                logger.error(f"Password reset token lookup failed: {exc.__class__.__name__}")
                return Return.err(INVALID_OR_EXPIRED), "lookup_failed", None

            if reset_token is None:
                return Return.err(INVALID_OR_EXPIRED), "invalid_token", None

            if reset_token.used:
                return Return.err(ALREADY_USED), "token_already_used", reset_token.user_id

            now = utcnow()
            if reset_token.is_expired(now):
                return Return.err(INVALID_OR_EXPIRED), "token_expired", reset_token.user_id

            user = await self.uow.users.get_by_id(reset_token.user_id)
            if user is None or user.is_federated:
                return Return.err(INVALID_OR_EXPIRED), "ineligible_account", reset_token.user_id

            password_hash = hash_password(new_password)

            if not await self.uow.password_reset_tokens.mark_used(reset_token.id, now):
                return Return.err(ALREADY_USED), "token_already_used", user.id

            user.password_hash = password_hash
            await self.uow.users.update(user)
            await TokenService(self.uow).revoke_all(user.id)
            await self.uow.commit()

        return Return.ok(MessageResponse(message=RESET_PASSWORD_MESSAGE)), None, user.id
