"""Room service — creating rooms, joining by invitation code, listing.

Learn: Membership is the only authorization concept for rooms. The
creator becomes the first member; anyone holding the invitation code
can join. Message access is gated on membership (see message_service).
"""

import secrets

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from chatroom.db.models import ChatRoom, RoomMember

logger = structlog.get_logger()

INVITATION_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
INVITATION_CODE_LENGTH = 8
MAX_CODE_ATTEMPTS = 5


class InvalidInvitationCodeError(Exception):
    """Raised when no room has the given invitation code."""


class AlreadyMemberError(Exception):
    """Raised when a user joins a room they already belong to."""


def generate_invitation_code() -> str:
    return "".join(
        secrets.choice(INVITATION_ALPHABET) for _ in range(INVITATION_CODE_LENGTH)
    )


class RoomService:
    """Business logic for chat rooms and memberships."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_room(
        self, user_id: int, name: str, description: str | None = None
    ) -> ChatRoom:
        """Create a room and add its creator as the first member."""
        room = ChatRoom(
            name=name,
            description=description,
            invitation_code=await self._unused_invitation_code(),
            created_by=user_id,
        )
        self.db.add(room)
        await self.db.flush()

        self.db.add(RoomMember(room_id=room.id, user_id=user_id))
        await self.db.commit()
        await self.db.refresh(room)

        logger.info("room.created", room_id=room.id, user_id=user_id)
        return room

    async def join_room(self, user_id: int, invitation_code: str) -> ChatRoom:
        result = await self.db.execute(
            select(ChatRoom).where(ChatRoom.invitation_code == invitation_code)
        )
        room = result.scalars().first()
        if not room:
            raise InvalidInvitationCodeError("Invalid invitation code")

        if await self.is_member(room.id, user_id):
            raise AlreadyMemberError("User is already a member of this room")

        self.db.add(RoomMember(room_id=room.id, user_id=user_id))
        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent join for the same user landed first
            await self.db.rollback()
            raise AlreadyMemberError("User is already a member of this room")

        logger.info("room.joined", room_id=room.id, user_id=user_id)
        return room

    async def list_user_rooms(self, user_id: int) -> list[tuple[ChatRoom, int]]:
        """Rooms the user belongs to with their member counts, newest activity first."""
        counts = (
            select(
                RoomMember.room_id,
                func.count(RoomMember.id).label("member_count"),
            )
            .group_by(RoomMember.room_id)
            .subquery()
        )
        q = (
            select(ChatRoom, counts.c.member_count)
            .join(RoomMember, RoomMember.room_id == ChatRoom.id)
            .join(counts, counts.c.room_id == ChatRoom.id)
            .where(RoomMember.user_id == user_id)
            .order_by(ChatRoom.updated_at.desc(), ChatRoom.id.desc())
        )
        result = await self.db.execute(q)
        return [(room, int(count)) for room, count in result.all()]

    async def is_member(self, room_id: int, user_id: int) -> bool:
        result = await self.db.execute(
            select(RoomMember.id).where(
                RoomMember.room_id == room_id,
                RoomMember.user_id == user_id,
            )
        )
        return result.first() is not None

    async def _unused_invitation_code(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_invitation_code()
            result = await self.db.execute(
                select(ChatRoom.id).where(ChatRoom.invitation_code == code)
            )
            if result.first() is None:
                return code
        raise RuntimeError("Could not generate a unique invitation code")
