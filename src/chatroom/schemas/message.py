"""Pydantic schemas for messages.

Learn: Responses always carry the sender's username alongside the
message row (a join against users), so clients don't need a second
lookup to render a conversation.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from chatroom.db.models import Message, MessageType


class MessageCreate(BaseModel):
    content: Optional[str] = None
    message_type: MessageType = MessageType.TEXT
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = Field(None, ge=0)
    file_type: Optional[str] = None


class MessageRead(BaseModel):
    id: int
    room_id: int
    user_id: int
    content: Optional[str] = None
    message_type: MessageType
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MessageWithUser(MessageRead):
    username: str

    @classmethod
    def from_row(cls, message: Message, username: str) -> "MessageWithUser":
        return cls(
            **MessageRead.model_validate(message).model_dump(),
            username=username,
        )
