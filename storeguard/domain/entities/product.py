"""
Product Entities

Catalog products and the downloadable files attached to them.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from storeguard.domain.base import utcnow


class Product(SQLModel, table=True):
    """Product entity - a sellable digital product"""

    __tablename__ = "products"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)
    description: Optional[str] = None
    price_cents: int = Field(default=0)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))


class ProductFile(SQLModel, table=True):
    """
    ProductFile entity - a downloadable asset belonging to one product.

    Business Rules:
    - storage_key is private and never returned to clients
    - Downloads are only ever served through short-lived signed links
    """

    __tablename__ = "product_files"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    product_id: UUID = Field(foreign_key="products.id", index=True)
    file_name: str = Field(max_length=255)
    file_type: str = Field(max_length=50)
    storage_key: str = Field(max_length=1024)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
