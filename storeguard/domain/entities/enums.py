"""
Storeguard Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserRole(str, Enum):
    """Account role"""

    customer = "customer"
    admin = "admin"


class AuthProvider(str, Enum):
    """Identity provider that owns the account's credentials"""

    local = "local"
    google = "google"
    microsoft = "microsoft"


class OrderStatus(str, Enum):
    """Order payment status"""

    pending = "pending"
    paid = "paid"
    failed = "failed"
    cancelled = "cancelled"
    refunded = "refunded"


class AuditAction(str, Enum):
    """Security-relevant actions recorded in the audit trail"""

    user_registered = "USER_REGISTERED"
    login_success = "LOGIN_SUCCESS"
    login_failure = "LOGIN_FAILURE"
    logout = "LOGOUT"
    refresh_token = "REFRESH_TOKEN"
    refresh_token_rejected = "REFRESH_TOKEN_REJECTED"
    forgot_password_attempt = "FORGOT_PASSWORD_ATTEMPT"
    password_reset_token_generated = "PASSWORD_RESET_TOKEN_GENERATED"
    password_reset_failed = "PASSWORD_RESET_FAILED"
    password_reset_success = "PASSWORD_RESET_SUCCESS"
    file_download = "FILE_DOWNLOAD"
