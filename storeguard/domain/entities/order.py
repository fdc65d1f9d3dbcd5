"""
Order Entities

Orders and their line items. Read-only to the access-control core.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from storeguard.domain.base import utcnow
from .enums import OrderStatus


class Order(SQLModel, table=True):
    """
    Order entity - a purchase by one user.

    Business Rules:
    - Only paid orders grant access to the files of their products
    """

    __tablename__ = "orders"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    status: OrderStatus = Field(default=OrderStatus.pending)
    total_cents: int = Field(default=0)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_order_user_status", "user_id", "status"),)


class OrderItem(SQLModel, table=True):
    """OrderItem entity - one product bought within an order"""

    __tablename__ = "order_items"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    order_id: UUID = Field(foreign_key="orders.id", index=True)
    product_id: UUID = Field(foreign_key="products.id", index=True)
    quantity: int = Field(default=1)
    price_cents: int = Field(default=0)
