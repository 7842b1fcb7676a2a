"""Authentication error taxonomy.

Learn: Callers outside the auth package only ever see two outcomes:
"invalid credentials" on login and "not authenticated" on protected
routes. The finer kinds below exist so the logs can say *why*.
"""


class AuthError(Exception):
    """Base class for authentication failures."""

    kind = "auth_error"


class InvalidCredentialFormatError(AuthError):
    """Stored digest does not parse as "salt:key".

    Never escapes PasswordHasher.verify(), which returns False instead.
    """

    kind = "invalid_credential_format"


class CredentialMismatchError(AuthError):
    """Login failed: unknown identity or wrong password.

    The message is the same for both cases; `reason` and `user_id` are
    for logs only.
    """

    kind = "credential_mismatch"

    def __init__(self, reason: str, user_id: int | None = None):
        super().__init__("Invalid email or password")
        self.reason = reason
        self.user_id = user_id


class TokenError(AuthError):
    """Raised when a bearer token fails verification."""

    kind = "token_error"


class MalformedTokenError(TokenError):
    """Token is not three dot-separated parts, or a part does not decode."""

    kind = "malformed_token"


class BadSignatureError(TokenError):
    """Token signature does not match the recomputed one."""

    kind = "bad_signature"


class TokenExpiredError(TokenError):
    """Current time is at or past the token's exp claim."""

    kind = "expired"
