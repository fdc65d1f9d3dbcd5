from fastapi import Depends, Request, status

from storeguard.api.error import ClientError
from storeguard.api.utils.client_ip import get_client_ip
from storeguard.app.services.rate_limiter import RATE_LIMITED_ERROR, RateLimiter, RouteClass
from storeguard.depends import get_rate_limiter


def throttle(route_class: RouteClass):
    """
    Route dependency that rejects a request with 429 once the client is over
    the limit for route_class. Runs before the endpoint body.
    """

    async def dependency(
        request: Request, rate_limiter: RateLimiter = Depends(get_rate_limiter)
    ) -> None:
        if not rate_limiter.allow(route_class, get_client_ip(request)):
            raise ClientError(RATE_LIMITED_ERROR, status_code=status.HTTP_429_TOO_MANY_REQUESTS)

    return dependency
