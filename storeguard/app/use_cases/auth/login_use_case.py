"""
Login Use Case

Verifies a local password and issues a fresh token pair.
"""

from typing import Optional

from storeguard.app.services.audit_logger import AuditLogger
from storeguard.app.services.passwords import burn_password_check, verify_password
from storeguard.app.services.token_service import TokenService
from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.domain.base import utcnow
from storeguard.domain.entities import AuditAction, normalize_email
from storeguard.libs.result import Error, Result, Return
from .dtos import AuthResponse, UserInfo


class LoginUseCase:
    """
    Use case for password login.

    Business Rules:
    - Unknown, federated and wrong-password attempts all get the same error
    - A bcrypt check always runs so response time does not reveal which case hit
    - A successful login replaces any previous refresh token
    - Updates user.last_login_at
    """

    def __init__(self, uow: UnitOfWork, audit_logger: AuditLogger):
        self.uow = uow
        self.audit_logger = audit_logger

    async def execute(
        self, email: str, password: str, client_ip: Optional[str] = None
    ) -> Result[AuthResponse]:
        email = normalize_email(email)
        failure_reason = None
        actor_id = None

        async with self.uow:
            user = await self.uow.users.get_by_email(email)

            if user is None or user.password_hash is None:
                burn_password_check(password)
                failure_reason = "user_not_found" if user is None else "federated_account"
                actor_id = user.id if user else None
            elif not verify_password(password, user.password_hash):
                failure_reason = "invalid_password"
                actor_id = user.id
            else:
                tokens = await TokenService(self.uow).issue(user)
                user.last_login_at = utcnow()
                user = await self.uow.users.update(user)
                await self.uow.commit()

        if failure_reason is not None:
            await self.audit_logger.record(
                AuditAction.login_failure,
                actor_id=actor_id,
                ip_address=client_ip,
                metadata={"email": email, "reason": failure_reason},
            )
            return Return.err(Error("INVALID_CREDENTIALS", "Invalid email or password"))

        await self.audit_logger.record(
            AuditAction.login_success,
            actor_id=user.id,
            ip_address=client_ip,
            metadata={"email": email},
        )

        return Return.ok(
            AuthResponse(
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
        )
