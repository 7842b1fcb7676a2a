"""Room API routes.

Learn: All routes act on behalf of the authenticated caller. The user
id comes from the token, never from the request body.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from chatroom.auth.dependencies import CurrentIdentity, get_current_user
from chatroom.db.engine import get_db
from chatroom.schemas.room import (
    JoinRoomRequest,
    RoomCreate,
    RoomRead,
    RoomWithMemberCount,
)
from chatroom.services.room_service import (
    AlreadyMemberError,
    InvalidInvitationCodeError,
    RoomService,
)

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> RoomService:
    return RoomService(db)


@router.post("/rooms", response_model=RoomRead, status_code=201)
async def create_room(
    body: RoomCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: RoomService = Depends(_svc),
):
    """Create a room. The creator is added as its first member."""
    return await svc.create_room(
        user_id=identity.user_id, name=body.name, description=body.description
    )


@router.post("/rooms/join", response_model=RoomRead)
async def join_room(
    body: JoinRoomRequest,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: RoomService = Depends(_svc),
):
    try:
        return await svc.join_room(identity.user_id, body.invitation_code)
    except InvalidInvitationCodeError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AlreadyMemberError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/rooms", response_model=list[RoomWithMemberCount])
async def list_my_rooms(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: RoomService = Depends(_svc),
):
    """Rooms the caller belongs to, most recently updated first."""
    rows = await svc.list_user_rooms(identity.user_id)
    return [RoomWithMemberCount.from_row(room, count) for room, count in rows]
