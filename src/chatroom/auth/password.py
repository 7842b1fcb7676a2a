"""Password hashing utilities.

Learn: Uses PBKDF2-HMAC-SHA512 with a fresh 32-byte random salt per hash.
The stored digest is "<salt hex>:<key hex>": 64 hex chars of salt, a
colon, then 128 hex chars of derived key. The iteration count is not
stored in the digest, so changing it invalidates existing digests.

Verification recomputes the key with the stored salt and compares with
hmac.compare_digest, which does not short-circuit on the first differing
byte. A digest that can't be parsed verifies as False; bad stored data
must never crash a login.
"""

import hashlib
import hmac
import secrets

import structlog

from chatroom.auth.errors import InvalidCredentialFormatError

logger = structlog.get_logger()

SALT_BYTES = 32
KEY_BYTES = 64
HASH_NAME = "sha512"
DEFAULT_ITERATIONS = 10_000
SEPARATOR = ":"


def parse_digest(digest: str) -> tuple[bytes, bytes]:
    """Split a stored digest into (salt, key) bytes.

    Raises InvalidCredentialFormatError unless the digest is exactly two
    non-empty hex fields joined by ":".
    """
    if not isinstance(digest, str):
        raise InvalidCredentialFormatError("digest is not a string")

    parts = digest.split(SEPARATOR)
    if len(parts) != 2:
        raise InvalidCredentialFormatError(
            f"expected 2 fields, got {len(parts)}"
        )

    salt_hex, key_hex = parts
    if not salt_hex or not key_hex:
        raise InvalidCredentialFormatError("empty salt or key")

    try:
        return bytes.fromhex(salt_hex), bytes.fromhex(key_hex)
    except ValueError:
        raise InvalidCredentialFormatError("salt or key is not hex")


class PasswordHasher:
    """Derives and checks salted password digests.

    Stateless apart from the iteration count, so one instance can be
    shared by every request and thread.
    """

    def __init__(self, iterations: int = DEFAULT_ITERATIONS):
        if iterations < DEFAULT_ITERATIONS:
            raise ValueError(
                f"iterations must be at least {DEFAULT_ITERATIONS}"
            )
        self.iterations = iterations
        self._dummy_digest: str | None = None

    def hash(self, password: str) -> str:
        """Hash a password with a fresh random salt."""
        if not password:
            raise ValueError("password must not be empty")
        salt = secrets.token_bytes(SALT_BYTES)
        key = self._derive(password, salt)
        return f"{salt.hex()}{SEPARATOR}{key.hex()}"

    def verify(self, password: str, digest: str) -> bool:
        """Check a password against a stored digest.

        Returns False for a malformed digest instead of raising.
        """
        try:
            salt, expected = parse_digest(digest)
        except InvalidCredentialFormatError as e:
            logger.warning("auth.digest_malformed", error=str(e))
            return False

        actual = self._derive(password, salt)
        return hmac.compare_digest(actual, expected)

    def burn(self, password: str) -> None:
        """Spend the same time as a real verify() and discard the result.

        Login calls this when the email is unknown, so response time
        doesn't reveal which emails are registered.
        """
        if self._dummy_digest is None:
            self._dummy_digest = self.hash(secrets.token_urlsafe(16))
        self.verify(password, self._dummy_digest)

    def _derive(self, password: str, salt: bytes) -> bytes:
        return hashlib.pbkdf2_hmac(
            HASH_NAME,
            password.encode("utf-8"),
            salt,
            self.iterations,
            dklen=KEY_BYTES,
        )
