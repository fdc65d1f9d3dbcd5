from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, EmailStr, Field, field_validator

from storeguard.api.error import ClientError, ServerError
from storeguard.api.utils.client_ip import get_client_ip
from storeguard.api.utils.rate_limit import throttle
from storeguard.app.services.audit_logger import AuditLogger
from storeguard.app.services.email_sender import IEmailSender
from storeguard.app.services.identity_verifier import IIdentityVerifier
from storeguard.app.services.passwords import MAX_PASSWORD_BYTES, password_too_long
from storeguard.app.services.rate_limiter import RateLimiter, RouteClass
from storeguard.app.services.token_service import CallerIdentity
from storeguard.app.services.unit_of_work import UnitOfWork
from storeguard.app.use_cases.auth import (
    FORGOT_PASSWORD_MESSAGE,
    AuthResponse,
    FederatedLoginUseCase,
    ForgotPasswordUseCase,
    LoginUseCase,
    LogoutUseCase,
    MessageResponse,
    RefreshTokenUseCase,
    RegisterCommand,
    RegisterUseCase,
    ResetPasswordUseCase,
)
from storeguard.depends import (
    get_audit_logger,
    get_current_caller,
    get_email_sender,
    get_google_verifier,
    get_microsoft_verifier,
    get_rate_limiter,
    get_unit_of_work,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


class RegisterRequest(BaseModel):
    """
    Register HTTP request payload

    Validates incoming HTTP request before converting to RegisterCommand.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, description="User password (min 8 chars)")
    full_name: Optional[str] = Field(None, max_length=255, description="Display name")

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if password_too_long(value):
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")
        return value


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
    dependencies=[Depends(throttle(RouteClass.register))],
)
async def register(
    request: RegisterRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Register a local customer account and return a token pair.

    Raises:
        - 409 Conflict: Email already exists
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
        - 429 Too Many Requests: Rate limit exceeded
    """
    command = RegisterCommand(
        email=request.email, password=request.password, full_name=request.full_name
    )

    use_case = RegisterUseCase(uow, audit_logger)
    result = await use_case.execute(command, client_ip=get_client_ip(http_request))

    if result.is_err():
        error = result.error
        if error.code == "EMAIL_ALREADY_EXISTS":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        if error.code == "INVALID_PASSWORD":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value


class LoginRequest(BaseModel):
    """Login HTTP request payload"""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=AuthResponse,
    dependencies=[Depends(throttle(RouteClass.login))],
)
async def login(
    request: LoginRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Authenticate with email and password.

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 429 Too Many Requests: Rate limit exceeded
    """
    use_case = LoginUseCase(uow, audit_logger)
    result = await use_case.execute(
        request.email, request.password, client_ip=get_client_ip(http_request)
    )

    if result.is_err():
        error = result.error
        if error.code == "INVALID_CREDENTIALS":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    return result.value


class RefreshRequest(BaseModel):
    """Refresh token HTTP request payload"""

    refresh_token: str = Field(..., description="Refresh token")


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    response_model=AuthResponse,
    dependencies=[Depends(throttle(RouteClass.refresh))],
)
async def refresh(
    request: RefreshRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Rotate a refresh token. The presented token stops working immediately.

    Raises:
        - 401 Unauthorized: Invalid, expired or revoked refresh token
        - 429 Too Many Requests: Rate limit exceeded
    """
    use_case = RefreshTokenUseCase(uow, audit_logger)
    result = await use_case.execute(request.refresh_token, client_ip=get_client_ip(http_request))

    if result.is_err():
        error = result.error
        if error.code in ("INVALID_TOKEN", "TOKEN_REVOKED"):
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    return result.value


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def logout(
    http_request: Request,
    caller: CallerIdentity = Depends(get_current_caller),
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Revoke the caller's refresh token.

    Raises:
        - 401 Unauthorized: Missing or invalid access token
    """
    use_case = LogoutUseCase(uow, audit_logger)
    result = await use_case.execute(caller, client_ip=get_client_ip(http_request))

    if result.is_err():
        raise ServerError(result.error)

    return result.value


class ForgotPasswordRequest(BaseModel):
    """Forgot password HTTP request payload"""

    email: EmailStr = Field(..., description="User email address")


@router.post("/forgot-password", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def forgot_password(
    request: ForgotPasswordRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit_logger: AuditLogger = Depends(get_audit_logger),
    email_sender: IEmailSender = Depends(get_email_sender),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
):
    """
    Request a password reset link.

    Security:
        - No email enumeration: unknown, federated and real accounts all get
          the same 200 body
        - Rate limited per client

    Raises:
        - 429 Too Many Requests: Rate limit exceeded
    """
    use_case = ForgotPasswordUseCase(uow, audit_logger, email_sender, rate_limiter)
    result = await use_case.execute(request.email, client_ip=get_client_ip(http_request))

    if result.is_err():
        error = result.error
        if error.code == "RATE_LIMITED":
            raise ClientError(error, status_code=status.HTTP_429_TOO_MANY_REQUESTS)
        raise ServerError(error)

    # Every outcome gets the same body
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


class ResetPasswordRequest(BaseModel):
    """Reset password HTTP request payload"""

    token: str = Field(..., min_length=1, description="Password reset token from email")
    new_password: str = Field(..., description="New password (min 8 chars)")


@router.post("/reset-password", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def reset_password(
    request: ResetPasswordRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit_logger: AuditLogger = Depends(get_audit_logger),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
):
    """
    Set a new password with a reset token. Revokes the account's refresh token.

    Raises:
        - 400 Bad Request: Invalid or expired token, token already used,
          or password validation failed
        - 429 Too Many Requests: Rate limit exceeded
    """
    use_case = ResetPasswordUseCase(uow, audit_logger, rate_limiter)
    result = await use_case.execute(
        request.token, request.new_password, client_ip=get_client_ip(http_request)
    )

    if result.is_err():
        error = result.error
        if error.code in ("INVALID_OR_EXPIRED_TOKEN", "TOKEN_ALREADY_USED", "INVALID_PASSWORD"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "RATE_LIMITED":
            raise ClientError(error, status_code=status.HTTP_429_TOO_MANY_REQUESTS)
        raise ServerError(error)

    return result.value


class FederatedLoginRequest(BaseModel):
    """Identity provider sign-in HTTP request payload"""

    id_token: str = Field(..., min_length=1, description="ID token issued by the provider")


async def _federated_login(
    verifier: IIdentityVerifier,
    request: FederatedLoginRequest,
    http_request: Request,
    uow: UnitOfWork,
    audit_logger: AuditLogger,
) -> AuthResponse:
    use_case = FederatedLoginUseCase(uow, audit_logger, verifier)
    result = await use_case.execute(request.id_token, client_ip=get_client_ip(http_request))

    if result.is_err():
        error = result.error
        if error.code == "INVALID_TOKEN":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        if error.code == "ACCOUNT_PROVIDER_MISMATCH":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        if error.code == "IDENTITY_PROVIDER_UNAVAILABLE":
            raise ClientError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        raise ServerError(error)

    return result.value


@router.post(
    "/google",
    status_code=status.HTTP_200_OK,
    response_model=AuthResponse,
    dependencies=[Depends(throttle(RouteClass.login))],
)
async def google_login(
    request: FederatedLoginRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit_logger: AuditLogger = Depends(get_audit_logger),
    verifier: IIdentityVerifier = Depends(get_google_verifier),
):
    """
    Sign in with a Google ID token, creating a customer account on first use.

    Raises:
        - 401 Unauthorized: ID token rejected
        - 409 Conflict: Email belongs to an account with another sign-in method
        - 429 Too Many Requests: Rate limit exceeded
        - 503 Service Unavailable: Google sign-in not configured or unreachable
    """
    return await _federated_login(verifier, request, http_request, uow, audit_logger)


@router.post(
    "/microsoft",
    status_code=status.HTTP_200_OK,
    response_model=AuthResponse,
    dependencies=[Depends(throttle(RouteClass.login))],
)
async def microsoft_login(
    request: FederatedLoginRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit_logger: AuditLogger = Depends(get_audit_logger),
    verifier: IIdentityVerifier = Depends(get_microsoft_verifier),
):
    """
    Sign in with a Microsoft identity platform ID token, creating a customer
    account on first use.

    Raises:
        - 401 Unauthorized: ID token rejected
        - 409 Conflict: Email belongs to an account with another sign-in method
        - 429 Too Many Requests: Rate limit exceeded
        - 503 Service Unavailable: Microsoft sign-in not configured or unreachable
    """
    return await _federated_login(verifier, request, http_request, uow, audit_logger)
