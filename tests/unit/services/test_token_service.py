"""
Unit tests for TokenService

Access verification is pure; rotation and revocation go through a mocked
UnitOfWork.
"""
import asyncio
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from jose import jwt

from config import ApplicationConfig
from storeguard.api.utils.jwt import decode_refresh_token
from storeguard.app.services.token_service import TokenService, hash_token_id
from storeguard.domain.entities import User, UserRole


def make_user(role: UserRole = UserRole.customer) -> User:
    return User(id=uuid4(), email="customer@example.com", password_hash="x", role=role)


@pytest.mark.asyncio
async def test_issue_stores_hash_of_refresh_token_id(mock_uow):
    # Arrange
    user = make_user()
    service = TokenService(mock_uow)

    # Act
    pair = await service.issue(user)

    # Assert
    payload = decode_refresh_token(pair.refresh_token)
    args = mock_uow.users.set_refresh_token_hash.call_args.args
    assert args[0] == user.id
    assert args[1] == hash_token_id(payload["jti"])
    assert payload["jti"] not in args[1]
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_issue_access_token_verifies_to_caller(mock_uow):
    user = make_user(UserRole.admin)

    pair = await TokenService(mock_uow).issue(user)
    result = TokenService.verify_access(pair.access_token)

    assert result.is_ok()
    assert result.value.user_id == user.id
    assert result.value.role == UserRole.admin
    assert result.value.is_admin is True
    assert result.value.is_customer is False


def test_verify_access_expired_token():
    past = datetime.now(UTC) - timedelta(minutes=1)
    token = jwt.encode(
        {"sub": str(uuid4()), "role": "customer", "type": "access", "exp": past, "iat": past - timedelta(minutes=15)},
        ApplicationConfig.JWT_SECRET,
        algorithm="HS256",
    )

    result = TokenService.verify_access(token)

    assert result.is_err()
    assert result.error.code == "TOKEN_EXPIRED"


def test_verify_access_rejects_garbage():
    result = TokenService.verify_access("not-a-jwt")

    assert result.is_err()
    assert result.error.code == "INVALID_TOKEN"


def test_verify_access_rejects_wrong_secret():
    token = jwt.encode(
        {"sub": str(uuid4()), "role": "customer", "type": "access", "exp": datetime.now(UTC) + timedelta(minutes=5)},
        "someone-elses-secret",
        algorithm="HS256",
    )

    result = TokenService.verify_access(token)

    assert result.error.code == "INVALID_TOKEN"


def test_verify_access_rejects_non_access_type():
    token = jwt.encode(
        {"sub": str(uuid4()), "role": "customer", "type": "refresh", "exp": datetime.now(UTC) + timedelta(minutes=5)},
        ApplicationConfig.JWT_SECRET,
        algorithm="HS256",
    )

    result = TokenService.verify_access(token)

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_refresh_token_is_not_accepted_as_access_token(mock_uow):
    pair = await TokenService(mock_uow).issue(make_user())

    result = TokenService.verify_access(pair.refresh_token)

    assert result.is_err()
    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_rotate_swaps_against_presented_token(mock_uow):
    # Arrange
    user = make_user()
    service = TokenService(mock_uow)
    pair = await service.issue(user)
    old_jti = decode_refresh_token(pair.refresh_token)["jti"]
    mock_uow.users.get_by_id.return_value = user

    # Act
    result = await service.rotate(pair.refresh_token)

    # Assert
    assert result.is_ok()
    rotated_user, new_pair = result.value
    assert rotated_user is user
    assert new_pair.refresh_token != pair.refresh_token

    kwargs = mock_uow.users.swap_refresh_token_hash.call_args.kwargs
    assert kwargs["expected_hash"] == hash_token_id(old_jti)
    assert kwargs["new_hash"] == hash_token_id(decode_refresh_token(new_pair.refresh_token)["jti"])
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_rotate_superseded_token_is_revoked(mock_uow):
    user = make_user()
    service = TokenService(mock_uow)
    pair = await service.issue(user)
    mock_uow.users.get_by_id.return_value = user
    mock_uow.users.swap_refresh_token_hash.return_value = False

    result = await service.rotate(pair.refresh_token)

    assert result.is_err()
    assert result.error.code == "TOKEN_REVOKED"


@pytest.mark.asyncio
async def test_rotate_garbage_token_is_invalid(mock_uow):
    result = await TokenService(mock_uow).rotate("garbage")

    assert result.error.code == "INVALID_TOKEN"
    mock_uow.users.get_by_id.assert_not_called()
    mock_uow.users.swap_refresh_token_hash.assert_not_called()


@pytest.mark.asyncio
async def test_rotate_access_token_is_invalid(mock_uow):
    pair = await TokenService(mock_uow).issue(make_user())

    result = await TokenService(mock_uow).rotate(pair.access_token)

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_rotate_unknown_user_is_invalid(mock_uow):
    pair = await TokenService(mock_uow).issue(make_user())
    mock_uow.users.get_by_id.return_value = None

    result = await TokenService(mock_uow).rotate(pair.refresh_token)

    assert result.error.code == "INVALID_TOKEN"
    mock_uow.users.swap_refresh_token_hash.assert_not_called()


@pytest.mark.asyncio
async def test_concurrent_rotations_have_one_winner(mock_uow):
    # Arrange
    user = make_user()
    service = TokenService(mock_uow)
    pair = await service.issue(user)
    mock_uow.users.get_by_id.return_value = user

    current = {"hash": hash_token_id(decode_refresh_token(pair.refresh_token)["jti"])}

    async def swap(user_id, expected_hash, new_hash, issued_at):
        await asyncio.sleep(0)
        if current["hash"] != expected_hash:
            return False
        current["hash"] = new_hash
        return True

    mock_uow.users.swap_refresh_token_hash.side_effect = swap

    # Act
    results = await asyncio.gather(*(service.rotate(pair.refresh_token) for _ in range(5)))

    # Assert
    assert sum(r.is_ok() for r in results) == 1
    assert all(r.error.code == "TOKEN_REVOKED" for r in results if r.is_err())


@pytest.mark.asyncio
async def test_revoke_all_clears_refresh_reference(mock_uow):
    user_id = uuid4()

    revoked = await TokenService(mock_uow).revoke_all(user_id)

    assert revoked is True
    mock_uow.users.clear_refresh_token.assert_called_once_with(user_id)
