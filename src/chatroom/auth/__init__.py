"""Authentication: password digests and bearer tokens.

Learn: Two pieces, both pure and synchronous:
1. PasswordHasher → salted PBKDF2 digests stored as "salt:key" (hex)
2. TokenIssuer → HS256-signed JWTs carrying userId/email + iat/exp

The request dependency in dependencies.py ties them to FastAPI: it reads
the Bearer token, verifies it, and exposes the caller's identity.
"""

from chatroom.auth.errors import (
    AuthError,
    BadSignatureError,
    CredentialMismatchError,
    InvalidCredentialFormatError,
    MalformedTokenError,
    TokenError,
    TokenExpiredError,
)
from chatroom.auth.jwt import TokenIssuer
from chatroom.auth.password import PasswordHasher

__all__ = [
    "AuthError",
    "BadSignatureError",
    "CredentialMismatchError",
    "InvalidCredentialFormatError",
    "MalformedTokenError",
    "PasswordHasher",
    "TokenError",
    "TokenExpiredError",
    "TokenIssuer",
]
