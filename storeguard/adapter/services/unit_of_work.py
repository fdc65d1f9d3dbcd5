from sqlmodel.ext.asyncio.session import AsyncSession

from storeguard.adapter.repositories.audit_event_repository import AuditEventRepository
from storeguard.adapter.repositories.file_access_log_repository import FileAccessLogRepository
from storeguard.adapter.repositories.order_repository import OrderRepository
from storeguard.adapter.repositories.password_reset_token_repository import PasswordResetTokenRepository
from storeguard.adapter.repositories.product_file_repository import ProductFileRepository
from storeguard.adapter.repositories.user_repository import UserRepository
from storeguard.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.users = UserRepository(self.session)
        self.password_reset_tokens = PasswordResetTokenRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        self.orders = OrderRepository(self.session)
        self.product_files = ProductFileRepository(self.session)
        self.file_access_logs = FileAccessLogRepository(self.session)
        return self

    async def __aexit__(self, *args):
        # Anything not committed inside the block is discarded
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
