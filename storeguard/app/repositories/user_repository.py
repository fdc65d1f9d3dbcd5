from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from storeguard.domain.entities import AuthProvider, User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by normalized email address"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def get_by_provider_identity(
        self, provider: AuthProvider, provider_id: str
    ) -> Optional[User]:
        """Get the user an identity provider subject is linked to"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass

    @abstractmethod
    async def set_refresh_token_hash(
        self, user_id: UUID, token_hash: str, issued_at: datetime
    ) -> bool:
        """Unconditionally replace the current refresh token reference"""
        pass

    @abstractmethod
    async def swap_refresh_token_hash(
        self, user_id: UUID, expected_hash: str, new_hash: str, issued_at: datetime
    ) -> bool:
        """
        Replace the refresh token reference only if it still equals expected_hash.

        Returns:
            True if this call won the swap, False if the reference had already changed
        """
        pass

    @abstractmethod
    async def clear_refresh_token(self, user_id: UUID) -> bool:
        """Null the refresh token reference; True if a reference was cleared"""
        pass
