from abc import ABC, abstractmethod

from storeguard.domain.entities import FileAccessLog


class IFileAccessLogRepository(ABC):
    """FileAccessLog repository interface - application layer"""

    @abstractmethod
    async def create(self, entry: FileAccessLog) -> FileAccessLog:
        """Record a minted download link"""
        pass
