from datetime import UTC, datetime, timedelta
from uuid import UUID

from jose import jwt

from config import ApplicationConfig

ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def generate_access_token(user_id: UUID, role: str, email: str) -> str:
    """
    Generate JWT access token

    Args:
        user_id: User UUID
        role: User role (customer, admin)
        email: Normalized user email

    Returns:
        JWT token string (HS256, ACCESS_TOKEN_TTL_MINUTES expiry)
    """
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "role": role,
        "email": email,
        "type": ACCESS_TOKEN_TYPE,
        "exp": now + timedelta(minutes=ApplicationConfig.ACCESS_TOKEN_TTL_MINUTES),
        "iat": now,
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm=ALGORITHM)


def generate_refresh_token(user_id: UUID, token_id: str) -> str:
    """
    Generate JWT refresh token

    Args:
        user_id: User UUID
        token_id: Random identifier; its hash is what the user row remembers

    Returns:
        JWT token string (HS256, REFRESH_TOKEN_TTL_DAYS expiry)
    """
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "jti": token_id,
        "type": REFRESH_TOKEN_TYPE,
        "exp": now + timedelta(days=ApplicationConfig.REFRESH_TOKEN_TTL_DAYS),
        "iat": now,
    }
    return jwt.encode(payload, ApplicationConfig.JWT_REFRESH_SECRET, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Verify and decode an access token

    Raises:
        jose.ExpiredSignatureError: token is past its expiry
        jose.JWTError: any other signature or format problem
    """
    return jwt.decode(token, ApplicationConfig.JWT_SECRET, algorithms=[ALGORITHM])


def decode_refresh_token(token: str) -> dict:
    """
    Verify and decode a refresh token

    Raises:
        jose.JWTError: signature, format or expiry problem
    """
    return jwt.decode(token, ApplicationConfig.JWT_REFRESH_SECRET, algorithms=[ALGORITHM])
