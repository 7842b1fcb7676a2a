"""Message API routes.

Learn: Sending and listing are nested under the room; deletion is
addressed by message id alone since ownership is checked anyway.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from chatroom.auth.dependencies import CurrentIdentity, get_current_user
from chatroom.db.engine import get_db
from chatroom.schemas.message import MessageCreate, MessageWithUser
from chatroom.services.message_service import (
    InvalidMessageError,
    MessageAlreadyDeletedError,
    MessageNotFoundError,
    MessageService,
    NotRoomMemberError,
)

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> MessageService:
    return MessageService(db)


@router.post(
    "/rooms/{room_id}/messages", response_model=MessageWithUser, status_code=201
)
async def send_message(
    room_id: int,
    body: MessageCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: MessageService = Depends(_svc),
):
    try:
        message, username = await svc.send_message(
            identity.user_id,
            room_id,
            content=body.content,
            message_type=body.message_type,
            file_url=body.file_url,
            file_name=body.file_name,
            file_size=body.file_size,
            file_type=body.file_type,
        )
    except NotRoomMemberError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except InvalidMessageError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return MessageWithUser.from_row(message, username)


@router.get("/rooms/{room_id}/messages", response_model=list[MessageWithUser])
async def get_messages(
    room_id: int,
    limit: int = Query(50, gt=0, le=100),
    offset: int = Query(0, ge=0),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: MessageService = Depends(_svc),
):
    """Room history, newest first. Deleted messages are included and flagged."""
    try:
        rows = await svc.get_messages(
            identity.user_id, room_id, limit=limit, offset=offset
        )
    except NotRoomMemberError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return [MessageWithUser.from_row(message, username) for message, username in rows]


@router.delete("/messages/{message_id}", response_model=MessageWithUser)
async def delete_message(
    message_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: MessageService = Depends(_svc),
):
    try:
        message, username = await svc.delete_message(identity.user_id, message_id)
    except MessageNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MessageAlreadyDeletedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return MessageWithUser.from_row(message, username)
