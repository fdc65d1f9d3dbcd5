import base64
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from storeguard.app.repositories.audit_event_repository import IAuditEventRepository
from storeguard.domain.entities import AuditEvent


def encode_cursor(event: AuditEvent) -> str:
    raw = f"{event.created_at.isoformat()}|{event.id}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> Optional[Tuple[datetime, UUID]]:
    """None for anything that is not a cursor this repository produced."""
    try:
        created_at, event_id = base64.urlsafe_b64decode(cursor).decode("utf-8").split("|")
        return datetime.fromisoformat(created_at), UUID(event_id)
    except ValueError:
        return None


class AuditEventRepository(IAuditEventRepository):
    """AuditEvent repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Append an event; rows are never updated afterwards"""
        self.session.add(audit_event)
        await self.session.flush()
        await self.session.refresh(audit_event)
        return audit_event

    async def get_paginated(
        self,
        limit: int = 50,
        cursor: Optional[str] = None,
        action: Optional[str] = None,
    ) -> Tuple[List[AuditEvent], Optional[str]]:
        """
        Newest-first page of events.

        The cursor encodes (created_at, id) of the last row returned, so rows
        sharing a timestamp are neither skipped nor repeated. An unreadable
        cursor restarts from the newest event.
        """
        stmt = select(AuditEvent)

        if action:
            stmt = stmt.where(AuditEvent.action == action)

        position = decode_cursor(cursor) if cursor else None
        if position is not None:
            created_at, event_id = position
            stmt = stmt.where(
                or_(
                    AuditEvent.created_at < created_at,
                    and_(AuditEvent.created_at == created_at, AuditEvent.id < event_id),
                )
            )

        stmt = stmt.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(limit + 1)
        events = list((await self.session.exec(stmt)).all())

        if len(events) <= limit:
            return events, None

        events = events[:limit]
        return events, encode_cursor(events[-1])
