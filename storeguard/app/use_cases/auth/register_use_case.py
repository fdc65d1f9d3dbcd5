"""
Register Use Case

Creates a local customer account and signs it in.
"""

import logging

from sqlalchemy.exc import IntegrityError

from storeguard.app.services.audit_logger import AuditLogger
from storeguard.app.services.passwords import MAX_PASSWORD_BYTES, hash_password, password_too_long
from storeguard.app.services.token_service import TokenService
from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.domain.entities import AuditAction, AuthProvider, User, UserRole, normalize_email
from storeguard.libs.result import Error, Result, Return
from .dtos import AuthResponse, RegisterCommand, UserInfo

logger = logging.getLogger(__name__)


class RegisterUseCase:
    """
    Use case for public self-registration.

    Business Rules:
    - Email is normalized and must not already exist
    - Public registration always creates a local customer, never an admin
    - Password must fit in bcrypt's 72 byte input
    - Password hashed with bcrypt before storing
    - A token pair is issued immediately
    """

    def __init__(self, uow: UnitOfWork, audit_logger: AuditLogger):
        self.uow = uow
        self.audit_logger = audit_logger

    async def execute(self, command: RegisterCommand, client_ip: str = None) -> Result[AuthResponse]:
        if password_too_long(command.password):
            return Return.err(
                Error("INVALID_PASSWORD", f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")
            )

        email = normalize_email(command.email)

        async with self.uow:
            existing_user = await self.uow.users.get_by_email(email)
            if existing_user:
                return Return.err(Error("EMAIL_ALREADY_EXISTS", "Email already registered"))

            user = User(
                email=email,
                password_hash=hash_password(command.password),
                full_name=command.full_name,
                provider=AuthProvider.local,
                role=UserRole.customer,
            )
            try:
                user = await self.uow.users.create(user)
            except IntegrityError:
                # Lost a race with a concurrent registration of the same email
                logger.info(f"Concurrent registration detected for {email}")
                return Return.err(Error("EMAIL_ALREADY_EXISTS", "Email already registered"))

            tokens = await TokenService(self.uow).issue(user)
            await self.uow.commit()

        await self.audit_logger.record(
            AuditAction.user_registered,
            actor_id=user.id,
            ip_address=client_ip,
            entity="user",
            entity_id=str(user.id),
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
