from abc import ABC, abstractmethod

from storeguard.app.repositories.audit_event_repository import IAuditEventRepository
from storeguard.app.repositories.file_access_log_repository import IFileAccessLogRepository
from storeguard.app.repositories.order_repository import IOrderRepository
from storeguard.app.repositories.password_reset_token_repository import IPasswordResetTokenRepository
from storeguard.app.repositories.product_file_repository import IProductFileRepository
from storeguard.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    password_reset_tokens: IPasswordResetTokenRepository
    audit_events: IAuditEventRepository
    orders: IOrderRepository
    product_files: IProductFileRepository
    file_access_logs: IFileAccessLogRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
