"""
Order File API Routes

Listing and time-limited download of purchased files.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from storeguard.api.error import ClientError, ServerError
from storeguard.api.utils.client_ip import get_client_ip
from storeguard.api.utils.rate_limit import throttle
from storeguard.app.services.audit_logger import AuditLogger
from storeguard.app.services.rate_limiter import RouteClass
from storeguard.app.services.storage_signer import IStorageSigner
from storeguard.app.services.token_service import CallerIdentity
from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.app.use_cases.files import (
    DownloadUrlResponse,
    FileInfo,
    GetDownloadUrlUseCase,
    ListOrderFilesUseCase,
)
from storeguard.depends import (
    get_audit_logger,
    get_current_caller,
    get_storage_signer,
    get_unit_of_work,
)

router = APIRouter(
    prefix="/orders",
    tags=["Files"],
    dependencies=[Depends(throttle(RouteClass.file_access))],
)

STATUS_BY_CODE = {
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "FILE_NOT_IN_ORDER": status.HTTP_403_FORBIDDEN,
    "ORDER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "FILE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
}


def raise_for_error(error):
    status_code = STATUS_BY_CODE.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)


@router.get(
    "/{order_id}/files",
    status_code=status.HTTP_200_OK,
    response_model=List[FileInfo],
)
async def list_order_files(
    order_id: UUID,
    caller: CallerIdentity = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    List the files of a paid order owned by the caller. No links are returned.

    Raises:
        - 401 Unauthorized: Missing or invalid access token
        - 403 Forbidden: Caller is not a customer
        - 404 Not Found: Order missing, not owned or not paid
    """
    use_case = ListOrderFilesUseCase(uow)
    result = await use_case.execute(caller, order_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/{order_id}/files/{file_id}/download",
    status_code=status.HTTP_200_OK,
    response_model=DownloadUrlResponse,
)
async def get_download_url(
    order_id: UUID,
    file_id: UUID,
    http_request: Request,
    caller: CallerIdentity = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
    storage_signer: IStorageSigner = Depends(get_storage_signer),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Mint a signed download link valid for at most 300 seconds.

    Raises:
        - 401 Unauthorized: Missing or invalid access token
        - 403 Forbidden: Caller is not a customer, or file not part of this order
        - 404 Not Found: Order missing, not owned or not paid; or file missing
        - 500 Internal Server Error: Link could not be signed
    """
    use_case = GetDownloadUrlUseCase(uow, storage_signer, audit_logger)
    result = await use_case.execute(
        caller, order_id, file_id, client_ip=get_client_ip(http_request)
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value
