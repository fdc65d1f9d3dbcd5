from typing import Optional

from storeguard.app.services.audit_logger import AuditLogger
from storeguard.app.services.token_service import CallerIdentity, TokenService
from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.domain.entities import AuditAction
from storeguard.libs.result import Result, Return
from .dtos import LOGOUT_MESSAGE, MessageResponse


class LogoutUseCase:
    """Revokes the caller's refresh token. The access token lives out its TTL."""

    def __init__(self, uow: UnitOfWork, audit_logger: AuditLogger):
        self.uow = uow
        self.audit_logger = audit_logger

    async def execute(
        self, caller: CallerIdentity, client_ip: Optional[str] = None
    ) -> Result[MessageResponse]:
        async with self.uow:
            await TokenService(self.uow).revoke_all(caller.user_id)
            await self.uow.commit()

        await self.audit_logger.record(
            AuditAction.logout, actor_id=caller.user_id, ip_address=client_ip
        )
        return Return.ok(MessageResponse(message=LOGOUT_MESSAGE))
