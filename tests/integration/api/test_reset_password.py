import hashlib
from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import pytest
from sqlmodel import select

from storeguard.app.services.background import await_pending_tasks
from storeguard.domain.base import utcnow
from storeguard.domain.entities import AuditAction, AuditEvent, PasswordResetToken
from tests.fixtures.seed import create_user

LOGIN_URL = "/api/v1/auth/login"
REFRESH_URL = "/api/v1/auth/refresh"
FORGOT_URL = "/api/v1/auth/forgot-password"
RESET_URL = "/api/v1/auth/reset-password"

INVALID_OR_EXPIRED = {
    "error": {"code": "INVALID_OR_EXPIRED_TOKEN", "message": "Invalid or expired reset token"}
}


async def request_reset_secret(client, email_sender, email="admin@example.com") -> str:
    response = await client.post(FORGOT_URL, json={"email": email})
    assert response.status_code == 200
    await await_pending_tasks()
    _, link, _ = email_sender.sent[-1]
    return parse_qs(urlparse(link).query)["token"][0]


async def seed_token(db_session, user, secret: str, expires_in: timedelta) -> PasswordResetToken:
    token = PasswordResetToken(
        user_id=user.id,
        token_hash=hashlib.sha256(secret.encode()).hexdigest(),
        expires_at=utcnow() + expires_in,
    )
    db_session.add(token)
    await db_session.commit()
    return token


@pytest.mark.asyncio
async def test_full_password_reset(client, db_session, email_sender):
    # Arrange
    user = await create_user(db_session, "local_admin")
    before = await client.post(LOGIN_URL, json={"email": "admin@example.com", "password": "OldPassw0rd!"})
    assert before.status_code == 200
    old_refresh = before.json()["refresh_token"]
    secret = await request_reset_secret(client, email_sender)

    # Act
    response = await client.post(RESET_URL, json={"token": secret, "new_password": "NewPassw0rd!"})

    # Assert
    assert response.status_code == 200
    assert response.json() == {"message": "Password has been reset successfully"}

    await db_session.refresh(user)
    assert user.password_hash != "NewPassw0rd!"
    assert user.password_hash.startswith("$2")

    token = (await db_session.exec(select(PasswordResetToken))).one()
    await db_session.refresh(token)
    assert token.used is True
    assert token.used_at is not None

    old_login = await client.post(LOGIN_URL, json={"email": "admin@example.com", "password": "OldPassw0rd!"})
    assert old_login.status_code == 401

    new_login = await client.post(LOGIN_URL, json={"email": "admin@example.com", "password": "NewPassw0rd!"})
    assert new_login.status_code == 200
    assert new_login.json()["refresh_token"] != old_refresh

    # Sessions from before the reset are gone
    stale = await client.post(REFRESH_URL, json={"refresh_token": old_refresh})
    assert stale.status_code == 401

    actions = [e.action for e in (await db_session.exec(select(AuditEvent))).all()]
    assert AuditAction.password_reset_success.value in actions


@pytest.mark.asyncio
async def test_reset_token_is_single_use(client, db_session, email_sender):
    await create_user(db_session, "local_admin")
    secret = await request_reset_secret(client, email_sender)

    first = await client.post(RESET_URL, json={"token": secret, "new_password": "NewPassw0rd!"})
    second = await client.post(RESET_URL, json={"token": secret, "new_password": "OtherPassw0rd!"})

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json() == {
        "error": {"code": "TOKEN_ALREADY_USED", "message": "Reset token has already been used"}
    }

    login = await client.post(LOGIN_URL, json={"email": "admin@example.com", "password": "NewPassw0rd!"})
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_older_token_stays_valid_after_new_request(client, db_session, email_sender):
    await create_user(db_session, "local_admin")
    first_secret = await request_reset_secret(client, email_sender)
    await request_reset_secret(client, email_sender)

    response = await client.post(RESET_URL, json={"token": first_secret, "new_password": "NewPassw0rd!"})

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_expired_and_unknown_tokens_look_the_same(client, db_session):
    user = await create_user(db_session, "local_admin")
    await seed_token(db_session, user, "expired-secret", timedelta(seconds=-1))

    expired = await client.post(RESET_URL, json={"token": "expired-secret", "new_password": "NewPassw0rd!"})
    unknown = await client.post(RESET_URL, json={"token": "never-issued", "new_password": "NewPassw0rd!"})

    assert expired.status_code == unknown.status_code == 400
    assert expired.json() == unknown.json() == INVALID_OR_EXPIRED

    reasons = sorted(
        e.event_metadata["reason"]
        for e in (await db_session.exec(select(AuditEvent))).all()
    )
    assert reasons == ["invalid_token", "token_expired"]


@pytest.mark.asyncio
async def test_token_just_before_expiry_works(client, db_session):
    user = await create_user(db_session, "local_admin")
    await seed_token(db_session, user, "fresh-secret", timedelta(seconds=30))

    response = await client.post(RESET_URL, json={"token": "fresh-secret", "new_password": "NewPassw0rd!"})

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_federated_owner_cannot_reset(client, db_session):
    user = await create_user(db_session, "google_customer")
    await seed_token(db_session, user, "federated-secret", timedelta(minutes=10))

    response = await client.post(RESET_URL, json={"token": "federated-secret", "new_password": "NewPassw0rd!"})

    assert response.status_code == 400
    assert response.json() == INVALID_OR_EXPIRED


@pytest.mark.asyncio
async def test_short_password_leaves_token_unused(client, db_session):
    user = await create_user(db_session, "local_admin")
    token = await seed_token(db_session, user, "valid-secret", timedelta(minutes=10))

    response = await client.post(RESET_URL, json={"token": "valid-secret", "new_password": "short"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_PASSWORD"
    await db_session.refresh(token)
    assert token.used is False


@pytest.mark.asyncio
async def test_reset_password_rate_limited(client):
    for _ in range(5):
        response = await client.post(RESET_URL, json={"token": "guess", "new_password": "NewPassw0rd!"})
        assert response.status_code == 400

    response = await client.post(RESET_URL, json={"token": "guess", "new_password": "NewPassw0rd!"})

    assert response.status_code == 429


@pytest.mark.asyncio
async def test_over_long_password_is_rejected(client, db_session):
    user = await create_user(db_session, "local_admin")
    token = await seed_token(db_session, user, "valid-secret", timedelta(minutes=10))

    response = await client.post(RESET_URL, json={"token": "valid-secret", "new_password": "Aa1!" * 20})

    assert response.status_code == 400
    assert response.json() == {
        "error": {"code": "INVALID_PASSWORD", "message": "Password must be at most 72 bytes long"}
    }
    await db_session.refresh(token)
    assert token.used is False
