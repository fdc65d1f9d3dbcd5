"""
List Order Files Use Case

Lists the downloadable files of a paid order owned by the caller.
"""

from typing import List
from uuid import UUID

from storeguard.app.services.token_service import CallerIdentity
from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.libs.result import Result, Return
from .dtos import FileInfo
from .errors import FORBIDDEN, ORDER_NOT_FOUND


class ListOrderFilesUseCase:
    """
    Use case for listing the files an order grants access to.

    Business Rules:
    - Only customers may list files
    - A foreign, unpaid or missing order produces the same ORDER_NOT_FOUND
    - The listing never includes links or storage keys
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, caller: CallerIdentity, order_id: UUID) -> Result[List[FileInfo]]:
        if not caller.is_customer:
            return Return.err(FORBIDDEN)

        async with self.uow:
            order = await self.uow.orders.get_paid_order_for_user(order_id, caller.user_id)
            if order is None:
                return Return.err(ORDER_NOT_FOUND)

            product_ids = await self.uow.orders.get_product_ids(order.id)
            files = await self.uow.product_files.get_by_product_ids(product_ids)

        return Return.ok(
            [
                FileInfo(file_id=str(f.id), file_name=f.file_name, file_type=f.file_type)
                for f in files
            ]
        )
