"""
Get Audit Events Use Case

Retrieves the security audit trail with pagination.
"""

from typing import Any, Dict, Optional

from storeguard.app.services.token_service import CallerIdentity
from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.libs.result import Error, Result, Return


class GetAuditEventsUseCase:
    """
    Use case for retrieving audit events.

    Business Rules:
    - Caller must be an admin
    - Results ordered by newest first
    - Supports cursor-based pagination and filtering by action
    - Each event includes action, actor email, ip, timestamp, metadata
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        caller: CallerIdentity,
        limit: int = 50,
        cursor: Optional[str] = None,
        action: Optional[str] = None,
    ) -> Result[Dict[str, Any]]:
        """
        Execute get audit events use case.

        Args:
            caller: Verified identity from the access token
            limit: Maximum number of events to return
            cursor: Pagination cursor (optional)
            action: Only return events with this action (optional)

        Returns:
            Result with events list and next_cursor, or Error
        """
        if not caller.is_admin:
            return Return.err(
                Error("FORBIDDEN", "You do not have permission to view audit events")
            )

        async with self.uow:
            events, next_cursor = await self.uow.audit_events.get_paginated(
                limit=limit, cursor=cursor, action=action
            )

            # Resolve actor emails once per actor
            emails: Dict[Any, Optional[str]] = {}
            events_list = []
            for event in events:
                actor_email = None
                if event.actor_id:
                    if event.actor_id not in emails:
                        user = await self.uow.users.get_by_id(event.actor_id)
                        emails[event.actor_id] = user.email if user else None
                    actor_email = emails[event.actor_id]

                events_list.append(
                    {
                        "action": event.action,
                        "actor_email": actor_email,
                        "entity": event.entity,
                        "entity_id": event.entity_id,
                        "ip_address": event.ip_address,
                        "timestamp": event.created_at.isoformat() + "Z",
                        "metadata": event.event_metadata or {},
                    }
                )

        return Return.ok({"events": events_list, "next_cursor": next_cursor})
