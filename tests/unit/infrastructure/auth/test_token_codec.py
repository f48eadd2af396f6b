import time

import jwt
import pytest

from latchkey.infrastructure.auth.token_codec import (
    InvalidTokenError,
    TokenCodec,
    TokenExpiredError,
)


@pytest.fixture
def secret():
    return "test-secret-key-at-least-256-bits-long-for-security"


@pytest.fixture
def sample_payload():
    return {"sub": "usr_123", "email": "test@example.com", "type": "access"}


def test_sign_verify_roundtrip(sample_payload, secret):
    """Signed claims come back with issuer, issue time and expiry added."""
    issued_at = int(time.time())
    token = TokenCodec.sign(sample_payload, secret, 60, issued_at=issued_at)

    claims = TokenCodec.verify(token, secret)

    assert claims["sub"] == "usr_123"
    assert claims["email"] == "test@example.com"
    assert claims["iss"] == TokenCodec.ISSUER
    assert claims["iat"] == issued_at
    assert claims["exp"] == issued_at + 60


def test_verify_tampered_signature(sample_payload, secret):
    token = TokenCodec.sign(sample_payload, secret, 60)
    header, body, signature = token.split(".")
    tampered = ".".join([header, body, ("B" if signature[0] == "A" else "A") + signature[1:]])

    with pytest.raises(InvalidTokenError):
        TokenCodec.verify(tampered, secret)


def test_verify_tampered_expiry(sample_payload, secret):
    """Re-encoding the claims with a later expiry without the key breaks the signature."""
    token = TokenCodec.sign(sample_payload, secret, 60)
    claims = TokenCodec.verify(token, secret)
    forged = jwt.encode({**claims, "exp": claims["exp"] + 3600}, "attacker-key", algorithm="HS256")
    header, _, signature = token.split(".")
    spliced = ".".join([header, forged.split(".")[1], signature])

    with pytest.raises(InvalidTokenError):
        TokenCodec.verify(spliced, secret)


def test_verify_wrong_secret(sample_payload, secret):
    token = TokenCodec.sign(sample_payload, secret, 60)

    with pytest.raises(InvalidTokenError):
        TokenCodec.verify(token, "completely-different-secret")


def test_verify_expired_token(sample_payload, secret):
    issued_at = int(time.time()) - 120
    token = TokenCodec.sign(sample_payload, secret, 60, issued_at=issued_at)

    with pytest.raises(TokenExpiredError):
        TokenCodec.verify(token, secret)


def test_expired_is_an_invalid_token(sample_payload, secret):
    token = TokenCodec.sign(sample_payload, secret, 1, issued_at=int(time.time()) - 10)

    with pytest.raises(InvalidTokenError):
        TokenCodec.verify(token, secret)


def test_verify_malformed_token(secret):
    with pytest.raises(InvalidTokenError):
        TokenCodec.verify("invalid.token.here", secret)
    with pytest.raises(InvalidTokenError):
        TokenCodec.verify("", secret)


def test_verify_rejects_foreign_issuer(secret):
    now = int(time.time())
    token = jwt.encode(
        {"sub": "usr_123", "iss": "someone-else", "iat": now, "exp": now + 60},
        secret,
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError):
        TokenCodec.verify(token, secret)


def test_verify_requires_subject(secret):
    token = TokenCodec.sign({"type": "access"}, secret, 60)

    with pytest.raises(InvalidTokenError):
        TokenCodec.verify(token, secret)
