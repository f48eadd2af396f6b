"""Token codec for signing and verifying compact tokens.

Tokens are HS256 JWTs. The issue and expiry timestamps live inside the
signed claims, so tampering with either invalidates the signature.
"""

import time
from typing import Any

import jwt


class JWTError(Exception):
    """Base exception for JWT-related errors."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is malformed, tampered with or signed with another key."""

    pass


class TokenExpiredError(InvalidTokenError):
    """Raised when a token has expired."""

    pass


class TokenCodec:
    """Sign and verify tokens with a caller-supplied secret."""

    ALGORITHM = "HS256"
    ISSUER = "latchkey"

    @classmethod
    def sign(
        cls,
        payload: dict[str, Any],
        secret: str,
        ttl_seconds: int,
        issued_at: int | None = None,
    ) -> str:
        """Sign a payload.

        Args:
            payload: Claims to embed. ``iat``, ``exp`` and ``iss`` are set here.
            secret: Signing secret for this token purpose.
            ttl_seconds: Lifetime of the token.
            issued_at: Issue time as a Unix timestamp. Defaults to now.

        Returns:
            Encoded token string.
        """
        if issued_at is None:
            issued_at = int(time.time())
        claims = {
            **payload,
            "iss": cls.ISSUER,
            "iat": issued_at,
            "exp": issued_at + ttl_seconds,
        }
        return jwt.encode(claims, secret, algorithm=cls.ALGORITHM)

    @classmethod
    def verify(cls, token: str, secret: str) -> dict[str, Any]:
        """Verify a token and return its claims.

        Args:
            token: Encoded token string.
            secret: Secret the token is expected to be signed with.

        Returns:
            Decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is malformed or the signature does not match.
        """
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[cls.ALGORITHM],
                issuer=cls.ISSUER,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token") from e
