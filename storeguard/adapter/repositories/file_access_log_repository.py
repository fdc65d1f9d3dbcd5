from sqlmodel.ext.asyncio.session import AsyncSession

from storeguard.app.repositories.file_access_log_repository import IFileAccessLogRepository
from storeguard.domain.entities import FileAccessLog


class FileAccessLogRepository(IFileAccessLogRepository):
    """FileAccessLog repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: FileAccessLog) -> FileAccessLog:
        """Record a minted download link"""
        self.session.add(entry)
        await self.session.flush()
        return entry
