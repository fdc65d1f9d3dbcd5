from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from storeguard.domain.entities import ProductFile


class IProductFileRepository(ABC):
    """ProductFile repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, file_id: UUID) -> Optional[ProductFile]:
        """Get product file by ID"""
        pass

    @abstractmethod
    async def get_by_product_ids(self, product_ids: List[UUID]) -> List[ProductFile]:
        """Get every file attached to any of the given products"""
        pass
