"""
Client IP resolution for FastAPI requests.
"""

from fastapi import Request

from config import ApplicationConfig

PROXY_HEADERS = (
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Forwarded-For",
    "X-Real-IP",
)


def get_client_ip(request: Request) -> str:
    """
    Resolve the client address used for rate limiting and audit records.

    Proxy headers are only honoured when TRUST_PROXY_HEADERS is enabled;
    otherwise any client could pick its own rate-limit key.

    Returns:
        The resolved client IP string, or "" if none can be found.
    """
    if ApplicationConfig.TRUST_PROXY_HEADERS:
        for header in PROXY_HEADERS:
            ip_value = request.headers.get(header)
            if ip_value:
                client_ip = ip_value.split(",")[0].strip()
                if client_ip:
                    return client_ip

    return request.client.host if request.client else ""
