import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./storeguard.db")
    API_PREFIX = data.get("API_PREFIX", "/api/v1")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Tokens
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_REFRESH_SECRET = data.get(
        "JWT_REFRESH_SECRET", "dev-refresh-secret-key-change-in-production"
    )
    ACCESS_TOKEN_TTL_MINUTES = int(data.get("ACCESS_TOKEN_TTL_MINUTES", 15))
    REFRESH_TOKEN_TTL_DAYS = int(data.get("REFRESH_TOKEN_TTL_DAYS", 7))
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))

    # Password reset
    PASSWORD_RESET_TTL_MINUTES = int(data.get("PASSWORD_RESET_TTL_MINUTES", 15))
    FRONTEND_URL = data.get("FRONTEND_URL", "http://localhost:3000")

    # Federated sign-in; an empty client id disables that provider
    GOOGLE_CLIENT_ID = data.get("GOOGLE_CLIENT_ID", "")
    MICROSOFT_CLIENT_ID = data.get("MICROSOFT_CLIENT_ID", "")
    MICROSOFT_TENANT_ID = data.get("MICROSOFT_TENANT_ID", "common")
    IDENTITY_VERIFY_TIMEOUT_SECONDS = float(data.get("IDENTITY_VERIFY_TIMEOUT_SECONDS", 10))

    # Rate limits, "N/period" strings keyed by route class
    RATE_LIMITS = {
        "forgot_password": "3/minute",
        "reset_password": "5/minute",
        "login": "5/minute",
        "register": "5/minute",
        "refresh": "5/minute",
        "file_access": "100/minute",
        **data.get("RATE_LIMITS", {}),
    }
    TRUST_PROXY_HEADERS = bool(data.get("TRUST_PROXY_HEADERS", False))

    # Outbound mail
    MAIL_API_URL = data.get("MAIL_API_URL", "")
    MAIL_API_TOKEN = data.get("MAIL_API_TOKEN", "")
    MAIL_FROM_ADDRESS = data.get("MAIL_FROM_ADDRESS", "no-reply@storeguard.local")
    MAIL_FROM_NAME = data.get("MAIL_FROM_NAME", "Storeguard")

    # Object storage
    STORAGE_BUCKET = data.get("STORAGE_BUCKET", "")
    STORAGE_REGION = data.get("STORAGE_REGION", "us-east-1")
    STORAGE_ACCESS_KEY_ID = data.get("STORAGE_ACCESS_KEY_ID", "")
    STORAGE_SECRET_ACCESS_KEY = data.get("STORAGE_SECRET_ACCESS_KEY", "")
    SIGNED_URL_EXPIRY = int(data.get("SIGNED_URL_EXPIRY", 300))
    SIGNING_TIMEOUT_SECONDS = float(data.get("SIGNING_TIMEOUT_SECONDS", 10))
