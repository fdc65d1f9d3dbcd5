"""
Unit tests for ResetPasswordUseCase

Tests all business logic with mocked dependencies.
"""
import asyncio
import hashlib
from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from storeguard.app.services.passwords import verify_password
from storeguard.app.use_cases.auth import ResetPasswordUseCase
from storeguard.domain.base import utcnow
from storeguard.domain.entities import AuditAction, AuthProvider, PasswordResetToken, User

PLAIN_TOKEN = "reset_token_12345"
TOKEN_HASH = hashlib.sha256(PLAIN_TOKEN.encode()).hexdigest()
NEW_PASSWORD = "NewPassw0rd!"


def make_user(provider: AuthProvider = AuthProvider.local) -> User:
    return User(
        id=uuid4(),
        email="admin@example.com",
        password_hash="old_hashed_password" if provider == AuthProvider.local else None,
        provider=provider,
    )


def make_token(user: User, expires_in: timedelta = timedelta(minutes=10), used: bool = False):
    return PasswordResetToken(
        id=uuid4(),
        user_id=user.id,
        token_hash=TOKEN_HASH,
        used=used,
        expires_at=utcnow() + expires_in,
    )


@pytest.fixture
def use_case(mock_uow, audit_logger, rate_limiter):
    return ResetPasswordUseCase(mock_uow, audit_logger, rate_limiter)


@pytest.mark.asyncio
async def test_successful_reset(use_case, mock_uow, audit_logger):
    # Arrange
    user = make_user()
    token = make_token(user)
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = token
    mock_uow.users.get_by_id.return_value = user

    # Act
    result = await use_case.execute(PLAIN_TOKEN, NEW_PASSWORD, client_ip="10.0.0.1")

    # Assert
    assert result.is_ok()
    assert result.value.message == "Password has been reset successfully"
    mock_uow.password_reset_tokens.get_by_token_hash.assert_called_once_with(TOKEN_HASH)
    mock_uow.password_reset_tokens.mark_used.assert_called_once()
    assert mock_uow.password_reset_tokens.mark_used.call_args.args[0] == token.id

    updated_user = mock_uow.users.update.call_args.args[0]
    assert verify_password(NEW_PASSWORD, updated_user.password_hash)
    mock_uow.users.clear_refresh_token.assert_called_once_with(user.id)
    mock_uow.commit.assert_called_once()

    assert audit_logger.record.call_args.args[0] == AuditAction.password_reset_success
    assert audit_logger.record.call_args.kwargs["actor_id"] == user.id


@pytest.mark.asyncio
async def test_unknown_token(use_case, mock_uow, audit_logger):
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = None

    result = await use_case.execute("invalid_token", NEW_PASSWORD)

    assert result.is_err()
    assert result.error.code == "INVALID_OR_EXPIRED_TOKEN"
    assert result.error.message == "Invalid or expired reset token"
    mock_uow.users.update.assert_not_called()
    mock_uow.commit.assert_not_called()
    assert audit_logger.record.call_args.args[0] == AuditAction.password_reset_failed
    assert audit_logger.record.call_args.kwargs["metadata"] == {"reason": "invalid_token"}


@pytest.mark.asyncio
async def test_lookup_failure_reads_as_invalid(use_case, mock_uow, audit_logger):
    mock_uow.password_reset_tokens.get_by_token_hash.side_effect = OperationalError(
        "SELECT", {}, Exception("database is locked")
    )

    result = await use_case.execute(PLAIN_TOKEN, NEW_PASSWORD)

    assert result.error.code == "INVALID_OR_EXPIRED_TOKEN"
    assert audit_logger.record.call_args.kwargs["metadata"] == {"reason": "lookup_failed"}


@pytest.mark.asyncio
async def test_one_second_before_expiry_succeeds(use_case, mock_uow):
    user = make_user()
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = make_token(
        user, expires_in=timedelta(seconds=1)
    )
    mock_uow.users.get_by_id.return_value = user

    result = await use_case.execute(PLAIN_TOKEN, NEW_PASSWORD)

    assert result.is_ok()


@pytest.mark.asyncio
async def test_one_second_after_expiry_fails(use_case, mock_uow, audit_logger):
    user = make_user()
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = make_token(
        user, expires_in=timedelta(seconds=-1)
    )
    mock_uow.users.get_by_id.return_value = user

    result = await use_case.execute(PLAIN_TOKEN, NEW_PASSWORD)

    assert result.error.code == "INVALID_OR_EXPIRED_TOKEN"
    mock_uow.password_reset_tokens.mark_used.assert_not_called()
    assert audit_logger.record.call_args.kwargs["metadata"] == {"reason": "token_expired"}


@pytest.mark.asyncio
async def test_used_token_is_distinguishable(use_case, mock_uow, audit_logger):
    user = make_user()
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = make_token(user, used=True)

    result = await use_case.execute(PLAIN_TOKEN, NEW_PASSWORD)

    assert result.error.code == "TOKEN_ALREADY_USED"
    assert result.error.message == "Reset token has already been used"
    mock_uow.users.update.assert_not_called()
    assert audit_logger.record.call_args.kwargs["metadata"] == {"reason": "token_already_used"}


@pytest.mark.asyncio
async def test_federated_owner_is_ineligible(use_case, mock_uow, audit_logger):
    user = make_user(AuthProvider.microsoft)
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = make_token(user)
    mock_uow.users.get_by_id.return_value = user

    result = await use_case.execute(PLAIN_TOKEN, NEW_PASSWORD)

    assert result.error.code == "INVALID_OR_EXPIRED_TOKEN"
    mock_uow.password_reset_tokens.mark_used.assert_not_called()
    assert audit_logger.record.call_args.kwargs["metadata"] == {"reason": "ineligible_account"}


@pytest.mark.asyncio
async def test_missing_owner_is_ineligible(use_case, mock_uow):
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = make_token(make_user())
    mock_uow.users.get_by_id.return_value = None

    result = await use_case.execute(PLAIN_TOKEN, NEW_PASSWORD)

    assert result.error.code == "INVALID_OR_EXPIRED_TOKEN"


@pytest.mark.asyncio
async def test_losing_the_consume_race(use_case, mock_uow):
    user = make_user()
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = make_token(user)
    mock_uow.users.get_by_id.return_value = user
    mock_uow.password_reset_tokens.mark_used.return_value = False

    result = await use_case.execute(PLAIN_TOKEN, NEW_PASSWORD)

    assert result.error.code == "TOKEN_ALREADY_USED"
    mock_uow.users.update.assert_not_called()
    mock_uow.users.clear_refresh_token.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_concurrent_resets_have_exactly_one_winner(mock_uow, audit_logger):
    # Arrange
    from storeguard.app.services.rate_limiter import RateLimiter

    user = make_user()
    token = make_token(user)
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = token
    mock_uow.users.get_by_id.return_value = user

    consumed = set()

    async def mark_used(token_id, used_at):
        await asyncio.sleep(0)
        if token_id in consumed:
            return False
        consumed.add(token_id)
        return True

    mock_uow.password_reset_tokens.mark_used.side_effect = mark_used
    use_case = ResetPasswordUseCase(mock_uow, audit_logger, RateLimiter({}))

    # Act
    results = await asyncio.gather(
        *(use_case.execute(PLAIN_TOKEN, f"NewPassw0rd!{i}", client_ip="10.0.0.1") for i in range(8))
    )

    # Assert
    assert sum(r.is_ok() for r in results) == 1
    assert [r.error.code for r in results if r.is_err()] == ["TOKEN_ALREADY_USED"] * 7
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_password_too_short(use_case, mock_uow, audit_logger):
    result = await use_case.execute(PLAIN_TOKEN, "short")

    assert result.error.code == "INVALID_PASSWORD"
    mock_uow.password_reset_tokens.get_by_token_hash.assert_not_called()
    audit_logger.record.assert_not_called()


@pytest.mark.asyncio
async def test_password_over_bcrypt_limit(use_case, mock_uow, audit_logger):
    result = await use_case.execute(PLAIN_TOKEN, "Aa1!" * 20)

    assert result.error.code == "INVALID_PASSWORD"
    assert result.error.message == "Password must be at most 72 bytes long"
    mock_uow.password_reset_tokens.get_by_token_hash.assert_not_called()
    mock_uow.password_reset_tokens.mark_used.assert_not_called()


@pytest.mark.asyncio
async def test_password_limit_counts_bytes_not_characters(use_case, mock_uow):
    user = make_user()
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = make_token(user)
    mock_uow.users.get_by_id.return_value = user

    too_wide = await use_case.execute(PLAIN_TOKEN, "\u00e9" * 37)
    fits = await use_case.execute(PLAIN_TOKEN, "\u00e9" * 36)

    assert too_wide.error.code == "INVALID_PASSWORD"
    assert fits.is_ok()


@pytest.mark.asyncio
async def test_rate_limited_before_hashing(use_case, mock_uow):
    for _ in range(5):
        await use_case.execute(PLAIN_TOKEN, NEW_PASSWORD, client_ip="10.0.0.7")
    mock_uow.password_reset_tokens.get_by_token_hash.reset_mock()

    result = await use_case.execute(PLAIN_TOKEN, NEW_PASSWORD, client_ip="10.0.0.7")

    assert result.error.code == "RATE_LIMITED"
    mock_uow.password_reset_tokens.get_by_token_hash.assert_not_called()
