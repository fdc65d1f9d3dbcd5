from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from storeguard.app.repositories.product_file_repository import IProductFileRepository
from storeguard.domain.entities import ProductFile


class ProductFileRepository(IProductFileRepository):
    """ProductFile repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, file_id: UUID) -> Optional[ProductFile]:
        """Get product file by ID"""
        stmt = select(ProductFile).where(ProductFile.id == file_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_product_ids(self, product_ids: List[UUID]) -> List[ProductFile]:
        """Get every file attached to any of the given products"""
        if not product_ids:
            return []
        stmt = (
            select(ProductFile)
            .where(ProductFile.product_id.in_(product_ids))
            .order_by(ProductFile.created_at)
        )
        result = await self.session.exec(stmt)
        return list(result.all())
