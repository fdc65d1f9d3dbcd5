from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from storeguard.domain.entities import Order


class IOrderRepository(ABC):
    """Order repository interface - application layer"""

    @abstractmethod
    async def get_paid_order_for_user(
        self, order_id: UUID, user_id: UUID
    ) -> Optional[Order]:
        """Get an order only if it exists, belongs to user_id and is paid"""
        pass

    @abstractmethod
    async def get_product_ids(self, order_id: UUID) -> List[UUID]:
        """Get the distinct product IDs bought in an order"""
        pass
