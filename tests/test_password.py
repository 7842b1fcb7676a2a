"""Password hasher tests.

Learn: Pure unit tests — no database, no HTTP. They pin the stored
digest format ("salt:key", hex) because that is the contract with
rows already sitting in the users table.
"""

import re
from concurrent.futures import ThreadPoolExecutor

import pytest

from chatroom.auth.errors import InvalidCredentialFormatError
from chatroom.auth.password import (
    KEY_BYTES,
    SALT_BYTES,
    PasswordHasher,
    parse_digest,
)

DIGEST_RE = re.compile(r"[0-9a-f]{64}:[0-9a-f]{128}")


@pytest.fixture(scope="module")
def hasher():
    return PasswordHasher()


def test_hash_format(hasher):
    """Digest is 32-byte hex salt, colon, 64-byte hex key."""
    digest = hasher.hash("password123")
    assert DIGEST_RE.fullmatch(digest)


def test_verify_correct_password(hasher):
    digest = hasher.hash("password123")
    assert hasher.verify("password123", digest) is True


def test_verify_wrong_password(hasher):
    digest = hasher.hash("password123")
    assert hasher.verify("wrongpassword", digest) is False


def test_same_password_different_digests(hasher):
    """Fresh salt each time — same input, different digest, both verify."""
    d1 = hasher.hash("password123")
    d2 = hasher.hash("password123")
    assert d1 != d2
    assert d1.split(":")[0] != d2.split(":")[0]
    assert hasher.verify("password123", d1)
    assert hasher.verify("password123", d2)


def test_unicode_password(hasher):
    digest = hasher.hash("pässwörd-密码")
    assert hasher.verify("pässwörd-密码", digest)
    assert not hasher.verify("passwörd-密码", digest)


@pytest.mark.parametrize(
    "digest",
    [
        "",
        "no-delimiter-here",
        "a:b:c",
        ":" + "ab" * 64,
        "ab" * 32 + ":",
        "zz" * 32 + ":" + "ab" * 64,
        "ab" * 32 + ":" + "not-hex",
        ":",
    ],
)
def test_verify_malformed_digest_returns_false(hasher, digest):
    """Bad stored data never raises — it just doesn't match."""
    assert hasher.verify("password123", digest) is False


def test_verify_non_string_digest_returns_false(hasher):
    assert hasher.verify("password123", None) is False


def test_verify_truncated_key_returns_false(hasher):
    """Length mismatch between stored and derived key is a plain False."""
    digest = hasher.hash("password123")
    assert hasher.verify("password123", digest[:-2]) is False


def test_iterations_are_part_of_the_derivation(hasher):
    digest = hasher.hash("password123")
    other = PasswordHasher(iterations=20_000)
    assert other.verify("password123", digest) is False


def test_parse_digest_lengths(hasher):
    salt, key = parse_digest(hasher.hash("password123"))
    assert len(salt) == SALT_BYTES
    assert len(key) == KEY_BYTES


def test_parse_digest_rejects_wrong_field_count():
    with pytest.raises(InvalidCredentialFormatError):
        parse_digest("abcd")


def test_empty_password_rejected(hasher):
    with pytest.raises(ValueError):
        hasher.hash("")


def test_too_few_iterations_rejected():
    with pytest.raises(ValueError):
        PasswordHasher(iterations=1000)


def test_burn_does_not_raise(hasher):
    assert hasher.burn("anything") is None


def test_concurrent_use_from_threads(hasher):
    """One hasher shared across threads — no coordination needed."""
    passwords = [f"password-{i}" for i in range(8)]
    with ThreadPoolExecutor(max_workers=4) as pool:
        digests = list(pool.map(hasher.hash, passwords))
        results = list(pool.map(hasher.verify, passwords, digests))
    assert all(results)
    assert len(set(digests)) == len(digests)
