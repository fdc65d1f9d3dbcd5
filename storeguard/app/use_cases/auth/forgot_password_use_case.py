"""
Forgot Password Use Case

Issues a single-use password reset token without revealing whether the
account exists.
"""

import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Optional

from config import ApplicationConfig
from storeguard.app.services.audit_logger import AuditLogger
from storeguard.app.services.background import schedule_background
from storeguard.app.services.email_sender import IEmailSender
from storeguard.app.services.rate_limiter import RATE_LIMITED_ERROR, RateLimiter, RouteClass
from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.domain.base import utcnow
from storeguard.domain.entities import AuditAction, PasswordResetToken, normalize_email
from storeguard.libs.result import Result, Return
from .dtos import ForgotPasswordOutcome

logger = logging.getLogger(__name__)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def build_reset_link(token: str) -> str:
    return f"{ApplicationConfig.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"


class ForgotPasswordUseCase:
    """
    Use case for requesting a password reset.

    Business Rules:
    - Rate limited per client before the store is touched
    - Secret is 32 random bytes; only its SHA-256 is stored
    - Token expires PASSWORD_RESET_TTL_MINUTES (15) after creation
    - Federated accounts never get a token
    - A secret and hash are minted on every branch, so unknown and federated
      emails cost the same as real ones
    - Earlier unused tokens stay valid until they expire or are used
    - The email is sent in the background after commit; delivery failures
      never change the outcome
    """

    def __init__(
        self,
        uow: UnitOfWork,
        audit_logger: AuditLogger,
        email_sender: IEmailSender,
        rate_limiter: RateLimiter,
    ):
        self.uow = uow
        self.audit_logger = audit_logger
        self.email_sender = email_sender
        self.rate_limiter = rate_limiter

    async def execute(
        self, email: str, client_ip: Optional[str] = None
    ) -> Result[ForgotPasswordOutcome]:
        """
        Execute forgot password use case.

        Returns:
            Result with the internal outcome, or RATE_LIMITED. Callers must not
            expose the outcome.
        """
        if not self.rate_limiter.allow(RouteClass.forgot_password, client_ip):
            return Return.err(RATE_LIMITED_ERROR)

        email = normalize_email(email)

        reset_token = secrets.token_urlsafe(32)
        token_hash = hash_reset_token(reset_token)
        now = utcnow()
        expires_at = now + timedelta(minutes=ApplicationConfig.PASSWORD_RESET_TTL_MINUTES)

        user_id = None
        token_id = None

        async with self.uow:
            user = await self.uow.users.get_by_email(email)

            if user is None:
                outcome = ForgotPasswordOutcome.USER_NOT_FOUND
            elif user.is_federated:
                outcome = ForgotPasswordOutcome.FEDERATED
                user_id = user.id
            else:
                record = await self.uow.password_reset_tokens.create(
                    PasswordResetToken(
                        user_id=user.id,
                        token_hash=token_hash,
                        used=False,
                        created_at=now,
                        expires_at=expires_at,
                    )
                )
                await self.uow.commit()
                outcome = ForgotPasswordOutcome.ISSUED
                user_id = user.id
                token_id = record.id

        if outcome != ForgotPasswordOutcome.ISSUED:
            await self.audit_logger.record(
                AuditAction.forgot_password_attempt,
                actor_id=user_id,
                ip_address=client_ip,
                metadata={"email": email, "reason": outcome.value},
            )
            return Return.ok(outcome)

        await self.audit_logger.record(
            AuditAction.password_reset_token_generated,
            actor_id=user_id,
            ip_address=client_ip,
            entity="password_reset_token",
            entity_id=str(token_id),
            metadata={"email": email, "expires_at": expires_at.isoformat()},
        )

        schedule_background(
            self.email_sender.send_password_reset_email(
                email, build_reset_link(reset_token), expires_at
            ),
            name="password-reset-email",
        )
        logger.info(f"Password reset token issued for user {user_id}")

        return Return.ok(outcome)
