"""Message service — sending, paging, and soft-deleting messages.

Learn: Every operation is scoped by the caller's user_id:
- send/list require membership of the room
- delete requires authorship of the message

Deleted messages stay in the room history with is_deleted=True so
clients can render a "message deleted" placeholder.
"""

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chatroom.db.models import Message, MessageType, User, utcnow
from chatroom.services.room_service import RoomService

logger = structlog.get_logger()


class NotRoomMemberError(Exception):
    """Raised when the caller is not a member of the room."""


class InvalidMessageError(Exception):
    """Raised when a message is missing the field its type requires."""


class MessageNotFoundError(Exception):
    """Raised when a message doesn't exist or isn't the caller's."""


class MessageAlreadyDeletedError(Exception):
    """Raised when deleting a message that is already deleted."""


class MessageService:
    """Business logic for room messages."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.rooms = RoomService(db)

    async def send_message(
        self,
        user_id: int,
        room_id: int,
        *,
        content: Optional[str] = None,
        message_type: MessageType = MessageType.TEXT,
        file_url: Optional[str] = None,
        file_name: Optional[str] = None,
        file_size: Optional[int] = None,
        file_type: Optional[str] = None,
    ) -> tuple[Message, str]:
        """Post a message to a room. Returns (message, sender username)."""
        await self._require_member(room_id, user_id)

        if message_type == MessageType.TEXT and not content:
            raise InvalidMessageError("Text messages must have content")
        if message_type != MessageType.TEXT and not file_url:
            raise InvalidMessageError("File messages must have file_url")

        message = Message(
            room_id=room_id,
            user_id=user_id,
            content=content or None,
            message_type=message_type,
            file_url=file_url or None,
            file_name=file_name or None,
            file_size=file_size,
            file_type=file_type or None,
            is_deleted=False,
        )
        self.db.add(message)
        await self.db.commit()

        logger.info(
            "message.sent",
            message_id=message.id,
            room_id=room_id,
            user_id=user_id,
            message_type=message_type.value,
        )
        return await self._with_username(message.id)

    async def get_messages(
        self,
        user_id: int,
        room_id: int,
        limit: int = 50,
        offset: int = 0,
    ) -> list[tuple[Message, str]]:
        """Page through a room's history, newest first."""
        await self._require_member(room_id, user_id)

        q = (
            select(Message, User.username)
            .join(User, User.id == Message.user_id)
            .where(Message.room_id == room_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(q)
        return [(message, username) for message, username in result.all()]

    async def delete_message(
        self, user_id: int, message_id: int
    ) -> tuple[Message, str]:
        """Soft-delete one of the caller's own messages."""
        result = await self.db.execute(
            select(Message).where(
                Message.id == message_id,
                Message.user_id == user_id,
            )
        )
        message = result.scalars().first()
        if not message:
            raise MessageNotFoundError(
                "Message not found or you are not authorized to delete this message"
            )
        if message.is_deleted:
            raise MessageAlreadyDeletedError("Message is already deleted")

        now = utcnow()
        message.is_deleted = True
        message.deleted_at = now
        message.updated_at = now
        await self.db.commit()

        logger.info("message.deleted", message_id=message_id, user_id=user_id)
        return await self._with_username(message_id)

    async def _require_member(self, room_id: int, user_id: int) -> None:
        if not await self.rooms.is_member(room_id, user_id):
            raise NotRoomMemberError("User is not a member of this room")

    async def _with_username(self, message_id: int) -> tuple[Message, str]:
        result = await self.db.execute(
            select(Message, User.username)
            .join(User, User.id == Message.user_id)
            .where(Message.id == message_id)
            .execution_options(populate_existing=True)
        )
        message, username = result.one()
        return message, username
