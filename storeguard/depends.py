from functools import lru_cache

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from storeguard.adapter.services.google_identity_verifier import GoogleIdentityVerifier
from storeguard.adapter.services.http_email_sender import HttpEmailSender, LoggingEmailSender
from storeguard.adapter.services.microsoft_identity_verifier import MicrosoftIdentityVerifier
from storeguard.adapter.services.s3_storage_signer import S3StorageSigner
from storeguard.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from storeguard.api.error import ClientError
from storeguard.app.services.audit_logger import AuditLogger
from storeguard.app.services.email_sender import IEmailSender
from storeguard.app.services.identity_verifier import IIdentityVerifier
from storeguard.app.services.rate_limiter import RateLimiter
from storeguard.app.services.storage_signer import IStorageSigner
from storeguard.app.services.token_service import CallerIdentity, TokenService
from storeguard.libs.result import Error

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


async def get_audit_logger():
    # Own session, so audit writes never share a transaction with the request
    async with AsyncSessionLocal() as session:
        yield AuditLogger(SqlAlchemyUnitOfWork(session))


def get_email_sender() -> IEmailSender:
    if not ApplicationConfig.MAIL_API_URL:
        return LoggingEmailSender()
    return HttpEmailSender(
        api_url=ApplicationConfig.MAIL_API_URL,
        api_token=ApplicationConfig.MAIL_API_TOKEN,
        from_address=ApplicationConfig.MAIL_FROM_ADDRESS,
        from_name=ApplicationConfig.MAIL_FROM_NAME,
    )


@lru_cache(maxsize=1)
def get_storage_signer() -> IStorageSigner:
    return S3StorageSigner(
        bucket=ApplicationConfig.STORAGE_BUCKET,
        region=ApplicationConfig.STORAGE_REGION,
        access_key_id=ApplicationConfig.STORAGE_ACCESS_KEY_ID,
        secret_access_key=ApplicationConfig.STORAGE_SECRET_ACCESS_KEY,
    )


@lru_cache(maxsize=1)
def get_google_verifier() -> IIdentityVerifier:
    return GoogleIdentityVerifier(
        client_id=ApplicationConfig.GOOGLE_CLIENT_ID,
        timeout=ApplicationConfig.IDENTITY_VERIFY_TIMEOUT_SECONDS,
    )


@lru_cache(maxsize=1)
def get_microsoft_verifier() -> IIdentityVerifier:
    # Cached so the signing keys are fetched once per process
    return MicrosoftIdentityVerifier(
        client_id=ApplicationConfig.MICROSOFT_CLIENT_ID,
        tenant_id=ApplicationConfig.MICROSOFT_TENANT_ID,
        timeout=ApplicationConfig.IDENTITY_VERIFY_TIMEOUT_SECONDS,
    )


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


async def get_current_caller(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CallerIdentity:
    """
    Dependency to extract and verify the access token from the Authorization header.

    Returns:
        CallerIdentity with user_id, role and email

    Raises:
        ClientError: 401 if the token is missing, invalid or expired
    """
    if credentials is None:
        raise ClientError(
            Error("UNAUTHENTICATED", "Authentication required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    result = TokenService.verify_access(credentials.credentials)
    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_401_UNAUTHORIZED)

    return result.value
