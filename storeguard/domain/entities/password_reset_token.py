"""
PasswordResetToken Entity

Single-use, time-limited password recovery tokens.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from storeguard.domain.base import utcnow


class PasswordResetToken(SQLModel, table=True):
    """
    PasswordResetToken entity - password recovery tokens.

    Business Rules:
    - Expires 15 minutes after creation
    - token_hash is the SHA-256 of the emailed secret; the secret is never stored
    - Single-use: used flips false -> true exactly once
    - Issuing a new token does not invalidate earlier unused tokens
    """

    __tablename__ = "password_reset_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", index=True)
    token_hash: str = Field(max_length=64, unique=True)

    used: bool = Field(default=False)
    used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_password_reset_expires_at", "expires_at"),
        Index("idx_password_reset_used", "used"),
    )

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now
