"""
Authentication Use Cases

All authentication-related business logic.
"""

from .register_use_case import RegisterUseCase
from .login_use_case import LoginUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .logout_use_case import LogoutUseCase
from .forgot_password_use_case import ForgotPasswordUseCase
from .reset_password_use_case import ResetPasswordUseCase
from .federated_login_use_case import FederatedLoginUseCase
from .dtos import (
    FORGOT_PASSWORD_MESSAGE,
    AuthResponse,
    ForgotPasswordOutcome,
    MessageResponse,
    RegisterCommand,
    UserInfo,
)

__all__ = [
    # Use Cases
    "RegisterUseCase",
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "ForgotPasswordUseCase",
    "ResetPasswordUseCase",
    "FederatedLoginUseCase",
    # DTOs - Commands
    "RegisterCommand",
    # DTOs - Responses
    "AuthResponse",
    "MessageResponse",
    "UserInfo",
    # Internal outcomes
    "ForgotPasswordOutcome",
    "FORGOT_PASSWORD_MESSAGE",
]
