"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

FORGOT_PASSWORD_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent."
)
RESET_PASSWORD_MESSAGE = "Password has been reset successfully"
LOGOUT_MESSAGE = "Logged out successfully"


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterCommand(BaseModel):
    """Validated registration intent"""

    email: str
    password: str
    full_name: Optional[str] = None


# ============================================================================
# Internal outcomes
# ============================================================================


class ForgotPasswordOutcome(str, Enum):
    """
    What forgot-password actually did.

    Never leaves the service layer: the HTTP boundary maps every member to
    the same response body.
    """

    USER_NOT_FOUND = "user_not_found"
    FEDERATED = "federated_account"
    ISSUED = "issued"


# ============================================================================
# Response DTOs
# ============================================================================


class UserInfo(BaseModel):
    """User information in authentication responses"""

    id: str
    email: str
    role: str
    provider: str
    full_name: Optional[str] = None


class AuthResponse(BaseModel):
    """Response for register, login and refresh use cases"""

    user: UserInfo
    access_token: str
    refresh_token: str


class MessageResponse(BaseModel):
    """Plain acknowledgement"""

    message: str
