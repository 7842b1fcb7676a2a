"""Auth service — registration and login.

Learn: Service layer separates business logic from HTTP routing.
Key-derivation is deliberately slow (tens of ms), so hashing and
verification run in a worker thread via run_in_threadpool instead of
blocking the event loop.

Login never tells the caller whether the email or the password was
wrong. The distinction only goes to the log.
"""

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from chatroom.auth.errors import CredentialMismatchError
from chatroom.auth.jwt import TokenIssuer
from chatroom.auth.password import PasswordHasher
from chatroom.db.models import User

logger = structlog.get_logger()


class DuplicateUserError(Exception):
    """Raised when the username or email is already registered."""

    def __init__(self, field: str):
        super().__init__(f"{field.capitalize()} already registered")
        self.field = field


class AuthService:
    """Registers users, checks passwords, and mints tokens."""

    def __init__(
        self,
        db: AsyncSession,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
    ):
        self.db = db
        self.hasher = hasher
        self.issuer = issuer

    async def register(
        self, username: str, email: str, password: str
    ) -> tuple[User, str]:
        """Create a user and return it with a fresh token."""
        q = select(User).where(or_(User.username == username, User.email == email))
        result = await self.db.execute(q)
        existing = result.scalars().first()
        if existing:
            field = "username" if existing.username == username else "email"
            raise DuplicateUserError(field)

        password_hash = await run_in_threadpool(self.hasher.hash, password)
        user = User(username=username, email=email, password_hash=password_hash)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration
            await self.db.rollback()
            raise DuplicateUserError("username or email")
        await self.db.refresh(user)

        logger.info("auth.user_registered", user_id=user.id)
        return user, self.issue_token(user)

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials and return the user with a fresh token.

        Raises CredentialMismatchError for an unknown email or a wrong
        password alike.
        """
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalars().first()

        if not user:
            await run_in_threadpool(self.hasher.burn, password)
            raise CredentialMismatchError("unknown_identity")

        if not await self.check_password(user, password):
            raise CredentialMismatchError("wrong_password", user_id=user.id)

        logger.info("auth.login_succeeded", user_id=user.id)
        return user, self.issue_token(user)

    async def check_password(self, user: User, password: str) -> bool:
        return await run_in_threadpool(
            self.hasher.verify, password, user.password_hash
        )

    async def change_password(self, user: User, new_password: str) -> None:
        """Replace the stored digest. Existing tokens stay valid until exp."""
        user.password_hash = await run_in_threadpool(self.hasher.hash, new_password)
        await self.db.commit()
        logger.info("auth.password_changed", user_id=user.id)

    async def get_user(self, user_id: int) -> User | None:
        return await self.db.get(User, user_id)

    def issue_token(self, user: User) -> str:
        return self.issuer.issue(
            {"userId": user.id, "email": user.email, "username": user.username}
        )
