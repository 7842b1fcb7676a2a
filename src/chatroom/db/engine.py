"""Async SQLAlchemy engine and session factory.

Learn: One engine per process, one AsyncSession per request via the
get_db dependency. PostgreSQL (asyncpg) is the deployment target; a
sqlite+aiosqlite URL also works for local hacking, minus pool sizing.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from chatroom.config import settings


def _engine_options(url: str) -> dict:
    options = {"echo": settings.debug}
    if not url.startswith("sqlite"):
        options.update(pool_size=5, max_overflow=15, pool_pre_ping=True)
    return options


engine = create_async_engine(
    settings.database_url, **_engine_options(settings.database_url)
)

# expire_on_commit=False: services return ORM objects after commit and
# routes serialize them outside any further await on the session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        yield session
