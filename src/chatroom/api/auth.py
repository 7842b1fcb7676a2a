"""Auth API — registration, login, current user, password change.

Learn: Routes for account lifecycle:
- POST /auth/register → create account → user + token
- POST /auth/login → email/password → user + token
- GET /auth/me → current user info
- POST /auth/password → replace the stored password digest

Register and login are open; the other two require a Bearer token.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from chatroom.auth.dependencies import (
    CurrentIdentity,
    get_current_user,
    get_password_hasher,
    get_token_issuer,
)
from chatroom.auth.errors import CredentialMismatchError
from chatroom.auth.jwt import TokenIssuer
from chatroom.auth.password import PasswordHasher
from chatroom.db.engine import get_db
from chatroom.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserRead,
)
from chatroom.services.auth_service import AuthService, DuplicateUserError

logger = structlog.get_logger()

router = APIRouter(prefix="/auth")


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8)


def _svc(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(db, hasher, issuer)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(body: RegisterRequest, svc: AuthService = Depends(_svc)):
    """Create a new user account."""
    try:
        user, token = await svc.register(
            username=body.username, email=body.email, password=body.password
        )
    except DuplicateUserError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"user": user, "token": token}


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(_svc)):
    """Login with email and password → user + token."""
    try:
        user, token = await svc.login(email=body.email, password=body.password)
    except CredentialMismatchError as e:
        logger.info("auth.login_failed", reason=e.reason, user_id=e.user_id)
        raise HTTPException(status_code=401, detail=str(e))
    return {"user": user, "token": token}


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AuthService = Depends(_svc),
):
    """Get the current authenticated user's info."""
    user = await svc.get_user(identity.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("/password", status_code=204)
async def change_password(
    body: ChangePasswordRequest,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AuthService = Depends(_svc),
):
    """Change the current user's password (requires the current one)."""
    user = await svc.get_user(identity.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not await svc.check_password(user, body.current_password):
        logger.info(
            "auth.password_change_failed", reason="wrong_password", user_id=user.id
        )
        raise HTTPException(
            status_code=401,
            detail="Current password is incorrect",
            headers={"WWW-Authenticate": "Bearer"},
        )
    await svc.change_password(user, body.new_password)
