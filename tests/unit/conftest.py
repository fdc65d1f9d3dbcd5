import pytest
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from config import ApplicationConfig
from storeguard.app.services.rate_limiter import RateLimiter
from storeguard.app.services.token_service import CallerIdentity
from storeguard.domain.entities import UserRole


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.get_by_provider_identity = AsyncMock(return_value=None)
    uow.users.create = AsyncMock(side_effect=lambda user: user)
    uow.users.update = AsyncMock(side_effect=lambda user: user)
    uow.users.set_refresh_token_hash = AsyncMock(return_value=True)
    uow.users.swap_refresh_token_hash = AsyncMock(return_value=True)
    uow.users.clear_refresh_token = AsyncMock(return_value=True)

    uow.password_reset_tokens = MagicMock()
    uow.password_reset_tokens.create = AsyncMock(side_effect=lambda token: token)
    uow.password_reset_tokens.get_by_token_hash = AsyncMock(return_value=None)
    uow.password_reset_tokens.mark_used = AsyncMock(return_value=True)

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock(side_effect=lambda event: event)
    uow.audit_events.get_paginated = AsyncMock(return_value=([], None))

    uow.orders = MagicMock()
    uow.orders.get_paid_order_for_user = AsyncMock(return_value=None)
    uow.orders.get_product_ids = AsyncMock(return_value=[])

    uow.product_files = MagicMock()
    uow.product_files.get_by_id = AsyncMock(return_value=None)
    uow.product_files.get_by_product_ids = AsyncMock(return_value=[])

    uow.file_access_logs = MagicMock()
    uow.file_access_logs.create = AsyncMock(side_effect=lambda entry: entry)
    return uow


@pytest.fixture
def audit_logger():
    logger = MagicMock()
    logger.record = AsyncMock()
    return logger


@pytest.fixture
def rate_limiter():
    return RateLimiter(ApplicationConfig.RATE_LIMITS)


@pytest.fixture
def customer():
    return CallerIdentity(user_id=uuid4(), role=UserRole.customer, email="customer@example.com")


@pytest.fixture
def admin():
    return CallerIdentity(user_id=uuid4(), role=UserRole.admin, email="admin@example.com")
