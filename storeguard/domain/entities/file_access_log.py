"""
FileAccessLog Entity

Record of every signed download link handed out.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from storeguard.domain.base import utcnow


class FileAccessLog(SQLModel, table=True):
    """
    FileAccessLog entity - one row per minted download link.

    Business Rules:
    - Written only after the link is successfully minted
    - A failed write never revokes or blocks the minted link
    """

    __tablename__ = "file_access_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", index=True)
    order_id: UUID = Field(foreign_key="orders.id", index=True)
    file_id: UUID = Field(foreign_key="product_files.id")
    ip_address: Optional[str] = Field(default=None, max_length=64)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_file_access_created_at", "created_at"),)
