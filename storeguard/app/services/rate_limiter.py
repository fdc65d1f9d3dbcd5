"""
Rate Limiter

Moving-window request throttling keyed by (route class, client).
"""

import logging
from enum import Enum
from typing import Dict, Optional

from limits import RateLimitItem, parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from storeguard.libs.result import Error

logger = logging.getLogger(__name__)

RATE_LIMITED_ERROR = Error("RATE_LIMITED", "Too many requests, please try again later")


class RouteClass(str, Enum):
    forgot_password = "forgot_password"
    reset_password = "reset_password"
    login = "login"
    register = "register"
    refresh = "refresh"
    file_access = "file_access"


class RateLimiter:
    """
    One instance per process, created with the app and injected into handlers.

    Business Rules:
    - A client gets at most N admissions per window for each route class
    - Keys never interfere: exhausting one route class or one client
      leaves every other key untouched
    - Route classes without a configured limit are never throttled
    """

    def __init__(self, limits: Dict[str, str]):
        self._storage = MemoryStorage()
        self._strategy = MovingWindowRateLimiter(self._storage)
        self._limits: Dict[RouteClass, RateLimitItem] = {
            RouteClass(name): parse(value) for name, value in limits.items()
        }

    def limit_for(self, route_class: RouteClass) -> Optional[RateLimitItem]:
        return self._limits.get(route_class)

    def allow(self, route_class: RouteClass, client_id: str) -> bool:
        """Consume one slot; False when the client is over its limit."""
        item = self._limits.get(route_class)
        if item is None:
            return True
        allowed = self._strategy.hit(item, route_class.value, client_id or "unknown")
        if not allowed:
            logger.warning(f"Rate limit exceeded for {route_class.value} by {client_id}")
        return allowed

    def reset(self) -> None:
        self._storage.reset()
