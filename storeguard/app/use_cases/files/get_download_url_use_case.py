"""
Get Download URL Use Case

Proves ownership and payment, then mints a short-lived signed link.
"""

import asyncio
import logging
from typing import Optional
from uuid import UUID

from config import ApplicationConfig
from storeguard.app.services.audit_logger import AuditLogger
from storeguard.app.services.storage_signer import (
    MAX_SIGNED_URL_SECONDS,
    IStorageSigner,
    StorageSigningError,
)
from storeguard.app.services.token_service import CallerIdentity
from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.domain.entities import AuditAction, FileAccessLog
from storeguard.libs.result import Result, Return
from .dtos import DownloadUrlResponse
from .errors import FILE_NOT_FOUND, FILE_NOT_IN_ORDER, FORBIDDEN, ORDER_NOT_FOUND, SIGNING_FAILED

logger = logging.getLogger(__name__)


class GetDownloadUrlUseCase:
    """
    Use case for minting a download link for one file of a paid order.

    Business Rules:
    - Only customers may download
    - Order must exist, belong to the caller and be paid (one combined check)
    - The file's product must be among this order's items; owning the product
      through another order does not count
    - Links live at most 300 seconds
    - Signing happens after the read transaction is closed and is bounded by
      SIGNING_TIMEOUT_SECONDS; failures are not retried
    - Exactly one access log row per minted link, none when signing fails
    - Access log and audit failures never take back a minted link
    """

    def __init__(
        self, uow: UnitOfWork, storage_signer: IStorageSigner, audit_logger: AuditLogger
    ):
        self.uow = uow
        self.storage_signer = storage_signer
        self.audit_logger = audit_logger

    async def execute(
        self,
        caller: CallerIdentity,
        order_id: UUID,
        file_id: UUID,
        client_ip: Optional[str] = None,
    ) -> Result[DownloadUrlResponse]:
        if not caller.is_customer:
            return Return.err(FORBIDDEN)

        async with self.uow:
            order = await self.uow.orders.get_paid_order_for_user(order_id, caller.user_id)
            if order is None:
                return Return.err(ORDER_NOT_FOUND)

            product_file = await self.uow.product_files.get_by_id(file_id)
            if product_file is None:
                return Return.err(FILE_NOT_FOUND)

            product_ids = await self.uow.orders.get_product_ids(order.id)
            if product_file.product_id not in product_ids:
                logger.warning(
                    f"User {caller.user_id} requested file {file_id} outside order {order_id}"
                )
                return Return.err(FILE_NOT_IN_ORDER)

            storage_key = product_file.storage_key

        expires_in = min(ApplicationConfig.SIGNED_URL_EXPIRY, MAX_SIGNED_URL_SECONDS)
        try:
            download_url = await asyncio.wait_for(
                self.storage_signer.generate_signed_url(storage_key, expires_in),
                timeout=ApplicationConfig.SIGNING_TIMEOUT_SECONDS,
            )
        except (StorageSigningError, asyncio.TimeoutError) as exc:
            logger.error(f"Signing failed for file {file_id}: {exc.__class__.__name__}")
            return Return.err(SIGNING_FAILED)

        await self._record_access(caller.user_id, order_id, file_id, client_ip)
        await self.audit_logger.record(
            AuditAction.file_download,
            actor_id=caller.user_id,
            ip_address=client_ip,
            entity="product_file",
            entity_id=str(file_id),
            metadata={"order_id": str(order_id)},
        )

        return Return.ok(DownloadUrlResponse(download_url=download_url, expires_in=expires_in))

    async def _record_access(
        self, user_id: UUID, order_id: UUID, file_id: UUID, client_ip: Optional[str]
    ) -> None:
        try:
            async with self.uow:
                await self.uow.file_access_logs.create(
                    FileAccessLog(
                        user_id=user_id,
                        order_id=order_id,
                        file_id=file_id,
                        ip_address=client_ip,
                    )
                )
                await self.uow.commit()
        except Exception as exc:
            logger.error(f"Failed to record file access for {file_id}: {exc}")
