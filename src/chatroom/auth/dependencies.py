"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current user from the request.

The hasher and issuer live on app.state (built once in create_app) and
are reached through get_password_hasher / get_token_issuer, so tests
can swap them with app.dependency_overrides.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, HTTPException, Request

from chatroom.auth.errors import TokenError
from chatroom.auth.jwt import TokenIssuer
from chatroom.auth.password import PasswordHasher

logger = structlog.get_logger()


class CurrentIdentity:
    """The authenticated user making the request.

    Learn: Built purely from verified token claims, no database lookup.
    Downstream handlers scope membership and ownership checks by user_id.
    """

    def __init__(
        self,
        user_id: int,
        email: Optional[str] = None,
        username: Optional[str] = None,
    ):
        self.user_id = user_id
        self.email = email
        self.username = username


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def _unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: Optional[str] = Header(None),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if missing or invalid).

    Learn: Malformed, tampered, and expired tokens all produce the same
    401. The specific reason only goes to the log.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise _unauthenticated()

    token = authorization[7:].strip()
    try:
        claims = issuer.verify(token)
    except TokenError as e:
        logger.info("auth.token_rejected", reason=e.kind, error=str(e))
        raise _unauthenticated()

    user_id = claims.get("userId")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        logger.info("auth.token_rejected", reason="missing_user_id")
        raise _unauthenticated()

    return CurrentIdentity(
        user_id=user_id,
        email=claims.get("email"),
        username=claims.get("username"),
    )
