"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
A token is header.claims.signature, each part unpadded URL-safe base64,
the signature an HMAC-SHA256 over "header.claims" with the server secret.

Tokens carry the caller's claims (userId, email, username) plus iat/exp
as integer Unix seconds, and a random jti so two tokens minted within
the same second still differ. Nothing is stored server-side: a token stays
valid until exp, and rotating the secret invalidates every token at once.

The secret, TTL, and clock are constructor arguments rather than globals,
so tests can pin all three.
"""

import secrets
import time
from collections.abc import Callable, Mapping
from typing import Any

import jwt

from chatroom.auth.errors import (
    BadSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_ALGORITHM = "HS256"


class TokenIssuer:
    """Issues and verifies signed bearer tokens."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        algorithm: str = DEFAULT_ALGORITHM,
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ValueError("token secret must not be empty")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._secret = secret
        self.ttl_seconds = ttl_seconds
        self.algorithm = algorithm
        self._clock = clock

    def issue(self, claims: Mapping[str, Any]) -> str:
        """Create a token for the given claims.

        iat/exp/jti are always set here; any caller-supplied values for
        them are overwritten.
        """
        issued_at = int(self._clock())
        payload = {
            **claims,
            "iat": issued_at,
            "exp": issued_at + self.ttl_seconds,
            "jti": secrets.token_urlsafe(16),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """Verify a token and return its claims.

        Raises MalformedTokenError, BadSignatureError or TokenExpiredError
        (all TokenError subclasses).
        """
        if not isinstance(token, str) or len(token.split(".")) != 3:
            raise MalformedTokenError("Token must have exactly three parts")

        try:
            # exp is checked below against our own clock
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["iat", "exp"],
                },
            )
        except jwt.InvalidSignatureError:
            raise BadSignatureError("Token signature mismatch")
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(f"Invalid token: {e}")

        expires_at = claims["exp"]
        if not isinstance(expires_at, int) or isinstance(expires_at, bool):
            raise MalformedTokenError("exp claim must be an integer")
        if self._clock() >= expires_at:
            raise TokenExpiredError("Token has expired")

        return claims
