"""
Audit Logger

Best-effort writer for the security audit trail.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.domain.entities import AuditAction, AuditEvent

logger = logging.getLogger(__name__)

SECRET_KEYS = (
    "password",
    "token",
    "secret",
)


def scrub_metadata(metadata: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Drop every key that names a credential, at any depth."""
    if metadata is None:
        return None

    cleaned = {}
    for key, value in metadata.items():
        if any(marker in key.lower() for marker in SECRET_KEYS):
            continue
        if isinstance(value, dict):
            value = scrub_metadata(value)
        cleaned[key] = value
    return cleaned


class AuditLogger:
    """
    Writes audit events through its own UnitOfWork.

    Business Rules:
    - A failed write is logged and dropped, never surfaced to the caller
    - Metadata is scrubbed of passwords, tokens and secrets before writing
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def record(
        self,
        action: AuditAction,
        actor_id: Optional[UUID] = None,
        ip_address: Optional[str] = None,
        entity: Optional[str] = None,
        entity_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        event = AuditEvent(
            actor_id=actor_id,
            action=action.value,
            entity=entity,
            entity_id=entity_id,
            ip_address=ip_address,
            event_metadata=scrub_metadata(metadata),
        )
        try:
            async with self.uow:
                await self.uow.audit_events.create(event)
                await self.uow.commit()
        except Exception as exc:
            logger.error(f"Failed to record audit event {action.value}: {exc}")
