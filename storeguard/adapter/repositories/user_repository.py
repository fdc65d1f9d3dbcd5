from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from storeguard.app.repositories.user_repository import IUserRepository
from storeguard.domain.entities import AuthProvider, User


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by normalized email address"""
        stmt = select(User).where(User.email == email)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_provider_identity(
        self, provider: AuthProvider, provider_id: str
    ) -> Optional[User]:
        """Get the user an identity provider subject is linked to"""
        stmt = select(User).where(User.provider == provider, User.provider_id == provider_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, user: User) -> User:
        """Create a new user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update(self, user: User) -> User:
        """Update existing user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def set_refresh_token_hash(
        self, user_id: UUID, token_hash: str, issued_at: datetime
    ) -> bool:
        """Unconditionally replace the current refresh token reference"""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(refresh_token_hash=token_hash, refresh_token_issued_at=issued_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def swap_refresh_token_hash(
        self, user_id: UUID, expected_hash: str, new_hash: str, issued_at: datetime
    ) -> bool:
        """Compare-and-swap the refresh token reference in a single statement"""
        stmt = (
            update(User)
            .where(User.id == user_id, User.refresh_token_hash == expected_hash)
            .values(refresh_token_hash=new_hash, refresh_token_issued_at=issued_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def clear_refresh_token(self, user_id: UUID) -> bool:
        """Null the refresh token reference"""
        stmt = (
            update(User)
            .where(User.id == user_id, User.refresh_token_hash.is_not(None))
            .values(refresh_token_hash=None, refresh_token_issued_at=None)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0
