"""Pydantic schemas for chat rooms and memberships."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from chatroom.db.models import ChatRoom


class RoomCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class JoinRoomRequest(BaseModel):
    invitation_code: str = Field(..., min_length=1)


class RoomRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    invitation_code: str
    created_by: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RoomWithMemberCount(RoomRead):
    """Room as listed for one of its members."""
    member_count: int
    is_member: bool = True

    @classmethod
    def from_row(cls, room: ChatRoom, member_count: int) -> "RoomWithMemberCount":
        return cls(
            **RoomRead.model_validate(room).model_dump(),
            member_count=member_count,
        )
