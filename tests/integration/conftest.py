import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from storeguard.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from storeguard.api.app import create_app
from storeguard.app.services.audit_logger import AuditLogger
from storeguard.app.services.background import await_pending_tasks
from storeguard.depends import (
    get_audit_logger,
    get_email_sender,
    get_storage_signer,
    get_unit_of_work,
)
from tests.fixtures.fakes import FakeEmailSender, FakeStorageSigner


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
def email_sender():
    return FakeEmailSender()


@pytest_asyncio.fixture
def storage_signer():
    return FakeStorageSigner()


@pytest_asyncio.fixture
async def app(db_session, session_factory, email_sender, storage_signer):
    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    async def override_get_audit_logger():
        async with session_factory() as session:
            yield AuditLogger(SqlAlchemyUnitOfWork(session))

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_audit_logger] = override_get_audit_logger
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_storage_signer] = lambda: storage_signer
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await await_pending_tasks()
