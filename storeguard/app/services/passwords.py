import bcrypt

from config import ApplicationConfig

MIN_PASSWORD_LENGTH = 8
# bcrypt only reads the first 72 bytes and newer releases refuse longer input
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(password: str) -> str:
    hashed = bcrypt.hashpw(
        password.encode("utf-8"), bcrypt.gensalt(ApplicationConfig.BCRYPT_ROUNDS)
    )
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash or over-long password
        return False


def burn_password_check(password: str) -> None:
    """Spend the same bcrypt work as a real check when there is no hash to compare."""
    bcrypt.hashpw(
        password.encode("utf-8")[:MAX_PASSWORD_BYTES],
        bcrypt.gensalt(ApplicationConfig.BCRYPT_ROUNDS),
    )
