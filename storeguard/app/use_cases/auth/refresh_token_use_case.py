"""
Refresh Token Use Case

Handles refresh token rotation.
"""

from typing import Optional

from storeguard.app.services.audit_logger import AuditLogger
from storeguard.app.services.token_service import TokenService
from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.domain.entities import AuditAction
from storeguard.libs.result import Result, Return
from .dtos import AuthResponse, UserInfo


class RefreshTokenUseCase:
    """
    Use case for exchanging a refresh token for a new pair.

    Business Rules:
    - The presented token stops working the moment a new one is issued
    - A token that was superseded, logged out or reset is rejected as revoked
    """

    def __init__(self, uow: UnitOfWork, audit_logger: AuditLogger):
        self.uow = uow
        self.audit_logger = audit_logger

    async def execute(
        self, refresh_token: str, client_ip: Optional[str] = None
    ) -> Result[AuthResponse]:
        async with self.uow:
            result = await TokenService(self.uow).rotate(refresh_token)
            if result.is_ok():
                await self.uow.commit()

        if result.is_err():
            if result.error.code == "TOKEN_REVOKED":
                await self.audit_logger.record(
                    AuditAction.refresh_token_rejected,
                    ip_address=client_ip,
                    metadata={"reason": "revoked"},
                )
            return Return.err(result.error)

        user, tokens = result.value
        await self.audit_logger.record(
            AuditAction.refresh_token, actor_id=user.id, ip_address=client_ip
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
