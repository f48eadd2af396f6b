"""Tests for issuing, verifying, rotating and consuming tokens."""

import time

import jwt
import pytest

from latchkey.core.config import Settings
from latchkey.domain.exceptions import UnauthorizedError
from latchkey.infrastructure.auth import (
    AccessTokenPayload,
    InMemoryConsumedTokenStore,
    NullSessionRegistry,
    TokenCodec,
    TokenService,
)


class RecordingSessionRegistry:
    """Registry keeping sessions in a dict so revocation is observable."""

    def __init__(self):
        self.sessions: dict[str, dict] = {}

    async def store(self, user_id, jti, expires_at):
        self.sessions[jti] = {"user_id": user_id, "expires_at": expires_at, "revoked": False}

    async def is_active(self, user_id, jti):
        session = self.sessions.get(jti)
        return bool(session and session["user_id"] == user_id and not session["revoked"])

    async def consume(self, user_id, jti):
        return await self.revoke(user_id, jti)

    async def revoke(self, user_id, jti):
        session = self.sessions.get(jti)
        if session is None or session["revoked"]:
            return False
        session["revoked"] = True
        return True

    async def revoke_all_for_user(self, user_id):
        count = 0
        for session in self.sessions.values():
            if session["user_id"] == user_id and not session["revoked"]:
                session["revoked"] = True
                count += 1
        return count


def test_secrets_must_be_distinct():
    with pytest.raises(ValueError):
        TokenService(access_secret="same", refresh_secret="same", reset_secret="other")


def test_from_settings_parses_ttls():
    settings = Settings(
        _env_file=None,
        jwt_access_expires_in="5m",
        jwt_refresh_expires_in="2d",
        jwt_reset_expires_in="bogus",
    )

    service = TokenService.from_settings(settings)

    assert service.access_ttl_seconds == 300
    assert service.refresh_ttl_seconds == 172800
    assert service.reset_ttl_seconds == 900
    assert isinstance(service.session_registry, NullSessionRegistry)


@pytest.mark.asyncio
async def test_issue_and_verify_access_token(token_service: TokenService):
    tokens = await token_service.issue_auth_tokens("usr_1", "user@example.com", "customer")

    payload = token_service.verify_access_token(tokens.access_token)

    assert isinstance(payload, AccessTokenPayload)
    assert payload.sub == "usr_1"
    assert payload.email == "user@example.com"
    assert payload.role == "customer"
    assert payload.exp - payload.iat == token_service.access_ttl_seconds


@pytest.mark.asyncio
async def test_refresh_token_rejected_as_access_token(token_service: TokenService):
    tokens = await token_service.issue_auth_tokens("usr_1", "user@example.com", "customer")

    with pytest.raises(UnauthorizedError):
        token_service.verify_access_token(tokens.refresh_token)


@pytest.mark.asyncio
async def test_access_token_rejected_as_refresh_token(token_service: TokenService):
    tokens = await token_service.issue_auth_tokens("usr_1", "user@example.com", "customer")

    with pytest.raises(UnauthorizedError):
        await token_service.verify_refresh_token(tokens.access_token)


@pytest.mark.asyncio
async def test_type_claim_checked_even_with_right_secret(token_service: TokenService):
    """A refresh-shaped token signed with the access secret is still not an access token."""
    forged = TokenCodec.sign(
        {"sub": "usr_1", "jti": "abc", "type": "refresh"},
        token_service._access_secret,
        60,
    )

    with pytest.raises(UnauthorizedError, match="Invalid access token type"):
        token_service.verify_access_token(forged)


def test_expired_access_token(token_service: TokenService):
    now = int(time.time())
    expired = jwt.encode(
        {
            "sub": "usr_1",
            "email": "user@example.com",
            "role": "customer",
            "type": "access",
            "iss": TokenCodec.ISSUER,
            "iat": now - 120,
            "exp": now - 60,
        },
        token_service._access_secret,
        algorithm=TokenCodec.ALGORITHM,
    )

    with pytest.raises(UnauthorizedError, match="Token has expired"):
        token_service.verify_access_token(expired)


def test_access_token_missing_claims(token_service: TokenService):
    token = TokenCodec.sign({"sub": "usr_1", "type": "access"}, token_service._access_secret, 60)

    with pytest.raises(UnauthorizedError, match="Invalid token"):
        token_service.verify_access_token(token)


@pytest.mark.asyncio
async def test_rotate_refresh_token(token_service: TokenService):
    tokens = await token_service.issue_auth_tokens("usr_1", "user@example.com", "customer")

    rotated = await token_service.rotate_refresh_token(tokens.refresh_token)

    assert rotated.user_id == "usr_1"
    assert rotated.refresh_token != tokens.refresh_token
    new_payload = await token_service.verify_refresh_token(rotated.refresh_token)
    old_payload = await token_service.verify_refresh_token(tokens.refresh_token)
    assert new_payload.sub == old_payload.sub
    assert new_payload.jti != old_payload.jti


@pytest.mark.asyncio
async def test_null_registry_keeps_old_refresh_token_usable(token_service: TokenService):
    tokens = await token_service.issue_auth_tokens("usr_1", "user@example.com", "customer")
    await token_service.rotate_refresh_token(tokens.refresh_token)

    assert await token_service.revoke_all_refresh_sessions_for_user("usr_1") == 0
    payload = await token_service.verify_refresh_token(tokens.refresh_token)
    assert payload.sub == "usr_1"


@pytest.mark.asyncio
async def test_registry_revokes_rotated_refresh_token():
    registry = RecordingSessionRegistry()
    service = TokenService(
        access_secret="a-secret",
        refresh_secret="r-secret",
        reset_secret="p-secret",
        session_registry=registry,
    )
    tokens = await service.issue_auth_tokens("usr_1", "user@example.com", "customer")

    rotated = await service.rotate_refresh_token(tokens.refresh_token)

    with pytest.raises(UnauthorizedError, match="revoked"):
        await service.rotate_refresh_token(tokens.refresh_token)
    assert (await service.verify_refresh_token(rotated.refresh_token)).sub == "usr_1"


@pytest.mark.asyncio
async def test_registry_revoke_all_for_user():
    registry = RecordingSessionRegistry()
    service = TokenService(
        access_secret="a-secret",
        refresh_secret="r-secret",
        reset_secret="p-secret",
        session_registry=registry,
    )
    first = await service.issue_auth_tokens("usr_1", "user@example.com", "customer")
    second = await service.issue_auth_tokens("usr_1", "user@example.com", "customer")
    other = await service.issue_auth_tokens("usr_2", "other@example.com", "customer")

    assert await service.revoke_all_refresh_sessions_for_user("usr_1") == 2

    for token in (first.refresh_token, second.refresh_token):
        with pytest.raises(UnauthorizedError):
            await service.verify_refresh_token(token)
    assert (await service.verify_refresh_token(other.refresh_token)).sub == "usr_2"


@pytest.mark.asyncio
async def test_registered_session_expiry_matches_token(token_service: TokenService):
    registry = RecordingSessionRegistry()
    token_service.session_registry = registry

    tokens = await token_service.issue_auth_tokens("usr_1", "user@example.com", "customer")
    payload = await token_service.verify_refresh_token(tokens.refresh_token)

    assert registry.sessions[payload.jti]["expires_at"] == payload.exp


@pytest.mark.asyncio
async def test_password_reset_token_is_single_use(token_service: TokenService):
    issue = await token_service.issue_password_reset_token("usr_1", "user@example.com")

    payload = await token_service.consume_password_reset_token(issue.token)
    assert payload.sub == "usr_1"
    assert payload.jti == issue.jti
    assert payload.exp == issue.expires_at

    with pytest.raises(UnauthorizedError, match="Reset token is invalid or expired"):
        await token_service.consume_password_reset_token(issue.token)


@pytest.mark.asyncio
async def test_reset_tokens_are_independent(token_service: TokenService):
    first = await token_service.issue_password_reset_token("usr_1", "user@example.com")
    second = await token_service.issue_password_reset_token("usr_1", "user@example.com")

    await token_service.consume_password_reset_token(first.token)
    payload = await token_service.consume_password_reset_token(second.token)

    assert payload.jti == second.jti


@pytest.mark.asyncio
async def test_access_token_rejected_as_reset_token(token_service: TokenService):
    tokens = await token_service.issue_auth_tokens("usr_1", "user@example.com", "customer")

    with pytest.raises(UnauthorizedError):
        await token_service.consume_password_reset_token(tokens.access_token)


@pytest.mark.asyncio
async def test_rejected_reset_token_is_not_recorded():
    store = InMemoryConsumedTokenStore()
    service = TokenService(
        access_secret="a-secret",
        refresh_secret="r-secret",
        reset_secret="p-secret",
        consumed_store=store,
    )
    tokens = await service.issue_auth_tokens("usr_1", "user@example.com", "customer")

    with pytest.raises(UnauthorizedError):
        await service.consume_password_reset_token(tokens.refresh_token)

    assert len(store) == 0
