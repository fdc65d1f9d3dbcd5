from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from storeguard.app.repositories.order_repository import IOrderRepository
from storeguard.domain.entities import Order, OrderItem, OrderStatus


class OrderRepository(IOrderRepository):
    """Order repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_paid_order_for_user(
        self, order_id: UUID, user_id: UUID
    ) -> Optional[Order]:
        """Ownership and payment are checked in one query"""
        stmt = select(Order).where(
            Order.id == order_id,
            Order.user_id == user_id,
            Order.status == OrderStatus.paid,
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_product_ids(self, order_id: UUID) -> List[UUID]:
        """Get the distinct product IDs bought in an order"""
        stmt = select(OrderItem.product_id).where(OrderItem.order_id == order_id).distinct()
        result = await self.session.exec(stmt)
        return list(result.all())
