"""
User Entity

Represents a customer or administrator account.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel, UniqueConstraint

from storeguard.domain.base import utcnow
from .enums import AuthProvider, UserRole


class User(SQLModel, table=True):
    """
    User entity - a person who can sign in and buy products.

    Business Rules:
    - Email is unique and stored lower-cased
    - Password stored as bcrypt hash; always None for federated accounts
    - Federated accounts (google, microsoft) can never reset a password
    - provider_id is the identity provider's subject; (provider, provider_id)
      is unique
    - refresh_token_hash is the SHA-256 of the current refresh token id;
      None means no refresh token is currently valid
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: Optional[str] = Field(default=None, max_length=60)
    full_name: Optional[str] = Field(default=None, max_length=255)

    provider: AuthProvider = Field(default=AuthProvider.local)
    provider_id: Optional[str] = Field(default=None, max_length=255)
    role: UserRole = Field(default=UserRole.customer)

    # Current refresh credential reference
    refresh_token_hash: Optional[str] = Field(default=None, max_length=64)
    refresh_token_issued_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_user_provider", "provider"),
        UniqueConstraint("provider", "provider_id", name="uq_user_provider_identity"),
    )

    @property
    def is_federated(self) -> bool:
        return self.provider != AuthProvider.local


def normalize_email(email: str) -> str:
    return email.strip().lower()
