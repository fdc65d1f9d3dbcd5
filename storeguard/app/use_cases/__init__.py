"""
Use Cases

Organized into domain folders:
- auth/: Authentication and password recovery
- files/: Purchased file delivery
- audit/: Audit trail
"""

from .auth import (
    RegisterUseCase,
    LoginUseCase,
    RefreshTokenUseCase,
    LogoutUseCase,
    ForgotPasswordUseCase,
    ResetPasswordUseCase,
)
from .files import (
    ListOrderFilesUseCase,
    GetDownloadUrlUseCase,
)
from .audit import (
    GetAuditEventsUseCase,
)

__all__ = [
    # Auth
    "RegisterUseCase",
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "ForgotPasswordUseCase",
    "ResetPasswordUseCase",
    # Files
    "ListOrderFilesUseCase",
    "GetDownloadUrlUseCase",
    # Audit
    "GetAuditEventsUseCase",
]
