"""
Token Service

Issues, verifies, rotates and revokes access and refresh credentials.
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from typing import Tuple
from uuid import UUID

from jose import ExpiredSignatureError, JWTError

from storeguard.api.utils.jwt import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    decode_access_token,
    decode_refresh_token,
    generate_access_token,
    generate_refresh_token,
)
from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.domain.base import utcnow
from storeguard.domain.entities import User, UserRole
from storeguard.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class CallerIdentity:
    """Who is calling, as proven by a verified access token."""

    user_id: UUID
    role: UserRole
    email: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    @property
    def is_customer(self) -> bool:
        return self.role == UserRole.customer


def hash_token_id(token_id: str) -> str:
    return hashlib.sha256(token_id.encode("utf-8")).hexdigest()


class TokenService:
    """
    Token lifecycle on top of a caller-owned UnitOfWork.

    Business Rules:
    - Access tokens are verified without touching the store
    - At most one refresh token per user is valid at a time
    - Rotation is a compare-and-swap on the stored refresh reference, so
      only one of several concurrent rotations of the same token wins
    - Revocation does not shorten outstanding access tokens
    - Never commits; the calling use case owns the transaction
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def issue(self, user: User) -> TokenPair:
        """Mint a new pair and make its refresh token the only valid one."""
        token_id = secrets.token_urlsafe(32)
        await self.uow.users.set_refresh_token_hash(user.id, hash_token_id(token_id), utcnow())
        return TokenPair(
            access_token=generate_access_token(user.id, user.role.value, user.email),
            refresh_token=generate_refresh_token(user.id, token_id),
        )

    @staticmethod
    def verify_access(token: str) -> Result[CallerIdentity]:
        try:
            payload = decode_access_token(token)
        except ExpiredSignatureError:
            return Return.err(Error("TOKEN_EXPIRED", "Access token has expired"))
        except JWTError:
            return Return.err(Error("INVALID_TOKEN", "Invalid access token"))

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            return Return.err(Error("INVALID_TOKEN", "Invalid access token"))

        try:
            identity = CallerIdentity(
                user_id=UUID(payload["sub"]),
                role=UserRole(payload["role"]),
                email=payload.get("email", ""),
            )
        except (KeyError, ValueError):
            return Return.err(Error("INVALID_TOKEN", "Invalid access token"))

        return Return.ok(identity)

    async def rotate(self, refresh_token: str) -> Result[Tuple[User, TokenPair]]:
        """
        Exchange a refresh token for a new pair.

        Errors:
            - INVALID_TOKEN: bad signature, expired, wrong type, unknown user
            - TOKEN_REVOKED: well-formed but no longer the user's current token
        """
        try:
            payload = decode_refresh_token(refresh_token)
        except JWTError:
            return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

        if payload.get("type") != REFRESH_TOKEN_TYPE or not payload.get("jti"):
            return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

        try:
            user_id = UUID(payload["sub"])
        except (KeyError, ValueError):
            return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

        user = await self.uow.users.get_by_id(user_id)
        if user is None:
            return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

        new_token_id = secrets.token_urlsafe(32)
        swapped = await self.uow.users.swap_refresh_token_hash(
            user.id,
            expected_hash=hash_token_id(payload["jti"]),
            new_hash=hash_token_id(new_token_id),
            issued_at=utcnow(),
        )
        if not swapped:
            logger.warning(f"Refresh token reuse or revoked token for user {user.id}")
            return Return.err(Error("TOKEN_REVOKED", "Refresh token has been revoked"))

        pair = TokenPair(
            access_token=generate_access_token(user.id, user.role.value, user.email),
            refresh_token=generate_refresh_token(user.id, new_token_id),
        )
        return Return.ok((user, pair))

    async def revoke_all(self, user_id: UUID) -> bool:
        return await self.uow.users.clear_refresh_token(user_id)
