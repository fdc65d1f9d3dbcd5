"""
Storeguard Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AuditAction,
    AuthProvider,
    OrderStatus,
    UserRole,
)

# Export all entities
from .user import User, normalize_email
from .password_reset_token import PasswordResetToken
from .audit_event import AuditEvent
from .product import Product, ProductFile
from .order import Order, OrderItem
from .file_access_log import FileAccessLog

__all__ = [
    # Enums
    "AuditAction",
    "AuthProvider",
    "OrderStatus",
    "UserRole",
    # Entities
    "User",
    "normalize_email",
    "PasswordResetToken",
    "AuditEvent",
    "Product",
    "ProductFile",
    "Order",
    "OrderItem",
    "FileAccessLog",
]
