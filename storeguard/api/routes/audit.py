"""
Audit API Routes

Handles audit event retrieval endpoints.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from storeguard.api.error import ClientError, ServerError
from storeguard.app.services.token_service import CallerIdentity
from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.app.use_cases.audit import GetAuditEventsUseCase
from storeguard.depends import get_current_caller, get_unit_of_work

router = APIRouter(prefix="/audit", tags=["Audit"])


class AuditEventResponse(BaseModel):
    """Single audit event in response"""

    action: str
    actor_email: Optional[str]
    entity: Optional[str]
    entity_id: Optional[str]
    ip_address: Optional[str]
    timestamp: str
    metadata: Dict[str, Any]


class AuditEventsResponse(BaseModel):
    """GET /audit/events response payload"""

    events: List[AuditEventResponse]
    next_cursor: Optional[str]


@router.get(
    "/events",
    status_code=status.HTTP_200_OK,
    response_model=AuditEventsResponse,
)
async def get_audit_events(
    caller: CallerIdentity = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
    limit: int = Query(50, ge=1, le=100, description="Maximum number of events to return"),
    cursor: Optional[str] = Query(None, description="Pagination cursor"),
    action: Optional[str] = Query(None, description="Only events with this action"),
):
    """
    Get Audit Events

    Returns the security audit trail, newest first. Admins only.

    Raises:
        - 401 Unauthorized: Invalid or expired access token
        - 403 Forbidden: Caller is not an admin
    """
    use_case = GetAuditEventsUseCase(uow)
    result = await use_case.execute(caller, limit=limit, cursor=cursor, action=action)

    if result.is_err():
        error = result.error
        if error.code == "FORBIDDEN":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return result.value
