"""Token issuer tests.

Learn: The issuer takes its clock as a constructor argument, so these
tests control time exactly — no sleeps, no flaky expiry checks.
"""

import base64
import json

import pytest

from chatroom.auth.errors import (
    BadSignatureError,
    MalformedTokenError,
    TokenError,
    TokenExpiredError,
)
from chatroom.auth.jwt import TokenIssuer

SECRET = "unit-test-secret-9c2f4b7e1a8d4e6f0b3c5a7d9e1f2a4b"
START = 1_700_000_000


class FakeClock:
    def __init__(self, now: float = START):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _b64decode(part: str) -> dict:
    return json.loads(base64.urlsafe_b64decode(part + "=" * (-len(part) % 4)))


def _flip_middle_char(part: str) -> str:
    i = len(part) // 2
    replacement = "A" if part[i] != "A" else "B"
    return part[:i] + replacement + part[i + 1:]


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def issuer(clock):
    return TokenIssuer(SECRET, clock=clock)


def test_issue_then_verify_round_trip(issuer):
    token = issuer.issue({"userId": 42, "email": "a@b.com"})
    claims = issuer.verify(token)
    assert claims["userId"] == 42
    assert claims["email"] == "a@b.com"
    assert claims["iat"] == START
    assert claims["exp"] - claims["iat"] == 86400


def test_token_layout(issuer):
    """header.claims.signature, unpadded base64url, readable without the secret."""
    token = issuer.issue({"userId": 42, "email": "a@b.com"})
    parts = token.split(".")
    assert len(parts) == 3
    assert all("=" not in p for p in parts)

    header = _b64decode(parts[0])
    assert header["alg"] == "HS256"
    assert header["typ"] == "JWT"

    claims = _b64decode(parts[1])
    assert claims["userId"] == 42
    assert claims["email"] == "a@b.com"
    assert isinstance(claims["iat"], int)
    assert isinstance(claims["exp"], int)
    assert claims["exp"] - claims["iat"] == 86400


def test_configured_ttl(clock):
    issuer = TokenIssuer(SECRET, ttl_seconds=600, clock=clock)
    claims = issuer.verify(issuer.issue({"userId": 1}))
    assert claims["exp"] - claims["iat"] == 600


def test_caller_cannot_set_timestamps(issuer):
    token = issuer.issue({"userId": 1, "iat": 0, "exp": 2**40})
    claims = issuer.verify(token)
    assert claims["iat"] == START
    assert claims["exp"] == START + 86400


def test_sequential_tokens_differ(issuer, clock):
    first = issuer.issue({"userId": 7})
    clock.advance(1)
    second = issuer.issue({"userId": 7})
    assert first != second
    assert issuer.verify(first)["iat"] < issuer.verify(second)["iat"]


def test_tokens_within_same_second_differ(clock):
    """iat is whole seconds, so the jti is what keeps these apart."""
    clock.now = START + 0.1
    issuer = TokenIssuer(SECRET, clock=clock)
    first = issuer.issue({"userId": 42, "email": "a@b.com"})
    clock.now = START + 0.9
    second = issuer.issue({"userId": 42, "email": "a@b.com"})

    assert first != second
    first_claims, second_claims = issuer.verify(first), issuer.verify(second)
    assert first_claims["iat"] == second_claims["iat"] == START
    assert first_claims["jti"] != second_claims["jti"]


def test_caller_cannot_set_jti(issuer):
    claims = issuer.verify(issuer.issue({"userId": 1, "jti": "fixed"}))
    assert claims["jti"] != "fixed"


@pytest.mark.parametrize("index", [0, 1, 2])
def test_tampered_part_rejected(issuer, index):
    token = issuer.issue({"userId": 42, "email": "a@b.com"})
    parts = token.split(".")
    parts[index] = _flip_middle_char(parts[index])
    with pytest.raises(TokenError):
        issuer.verify(".".join(parts))


def test_modified_claims_fail_signature(issuer):
    """Re-encoding different claims under the old signature is caught."""
    header, _, signature = issuer.issue({"userId": 42}).split(".")
    forged = base64.urlsafe_b64encode(
        json.dumps({"userId": 1, "iat": START, "exp": START + 86400}).encode()
    ).rstrip(b"=").decode()
    with pytest.raises(BadSignatureError):
        issuer.verify(f"{header}.{forged}.{signature}")


def test_other_secret_rejected(issuer, clock):
    other = TokenIssuer("another-secret-0d1e2f3a4b5c6d7e8f9a0b1c2d3e4f5a", clock=clock)
    with pytest.raises(BadSignatureError):
        issuer.verify(other.issue({"userId": 42}))


def test_expired_at_exp(issuer, clock):
    """Valid one second before exp, expired exactly at exp."""
    token = issuer.issue({"userId": 42})
    clock.advance(86400 - 1)
    assert issuer.verify(token)["userId"] == 42
    clock.advance(1)
    with pytest.raises(TokenExpiredError):
        issuer.verify(token)


def test_expiry_is_not_a_signature_error(issuer, clock):
    token = issuer.issue({"userId": 42})
    clock.advance(2 * 86400)
    with pytest.raises(TokenError) as exc_info:
        issuer.verify(token)
    assert isinstance(exc_info.value, TokenExpiredError)
    assert not isinstance(exc_info.value, BadSignatureError)
    assert exc_info.value.kind == "expired"


@pytest.mark.parametrize(
    "token",
    ["", "abc", "a.b", "a.b.c.d", "a.b.c", "not a token at all"],
)
def test_malformed_tokens(issuer, token):
    with pytest.raises(MalformedTokenError):
        issuer.verify(token)


def test_empty_secret_rejected():
    with pytest.raises(ValueError):
        TokenIssuer("")


def test_non_positive_ttl_rejected():
    with pytest.raises(ValueError):
        TokenIssuer(SECRET, ttl_seconds=0)
