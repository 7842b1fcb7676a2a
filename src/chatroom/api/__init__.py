"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in each router
without modifying individual handlers. Health and auth routers are
open (no auth required); /auth/me and /auth/password declare the
dependency themselves.
"""

from fastapi import APIRouter, Depends

from chatroom.api.auth import router as auth_router
from chatroom.api.health import router as health_router
from chatroom.api.messages import router as messages_router
from chatroom.api.rooms import router as rooms_router
from chatroom.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api/v1")

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid Bearer token
api_router.include_router(rooms_router, tags=["rooms"], dependencies=_auth)
api_router.include_router(messages_router, tags=["messages"], dependencies=_auth)
