# chatrooms/services/message_log.py

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List

from chatrooms.core.errors import ChatError, ErrorCode
from chatrooms.models.models import Message
from chatrooms.services.identity_registry import IdentityRegistry, now_ms
from chatrooms.services.room_manager import RoomRegistry

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000
RECENT_MESSAGES_LIMIT = 50


class MessageLog:
    """
    Per-room append-only message history.

    Order is append order. created_at is informational only and may tie
    between two messages sent in the same millisecond.
    """

    def __init__(self, rooms: RoomRegistry, identities: IdentityRegistry) -> None:
        self.rooms = rooms
        self.identities = identities
        self.messages_by_room: Dict[str, List[Message]] = {}
        self._ids: set = set()

    def _new_id(self) -> str:
        while True:
            message_id = f"m_{uuid.uuid4().hex[:12]}"
            if message_id not in self._ids:
                self._ids.add(message_id)
                return message_id

    def append(self, room_id: str, sender_id: str, text: Any) -> Message:
        """
        Validate and store a message from a room member.

        Raises:
            ChatError: USER_NOT_FOUND, ROOM_NOT_FOUND, FORBIDDEN,
                EMPTY_MESSAGE or MESSAGE_TOO_LONG, checked in that order
        """
        sender = self.identities.get(sender_id)
        if not sender:
            raise ChatError(ErrorCode.USER_NOT_FOUND, "User not found")
        room = self.rooms.get_room(room_id)
        if not room:
            raise ChatError(ErrorCode.ROOM_NOT_FOUND, "Room not found")
        if not self.rooms.is_member(room.id, sender.id):
            raise ChatError(ErrorCode.FORBIDDEN, "User is not in the room")

        body = (text if isinstance(text, str) else "").strip()
        if not body:
            raise ChatError(ErrorCode.EMPTY_MESSAGE, "Message cannot be empty")
        if len(body) > MAX_MESSAGE_LENGTH:
            raise ChatError(ErrorCode.MESSAGE_TOO_LONG, f"Max {MAX_MESSAGE_LENGTH} chars")

        message = Message(
            id=self._new_id(),
            room_id=room.id,
            sender_user_id=sender.id,
            sender_name=sender.name,
            text=body,
            created_at=now_ms(),
        )
        self.messages_by_room.setdefault(room.id, []).append(message)
        return message

    def _log(self, room_id: str) -> List[Message]:
        if not self.rooms.exists(room_id):
            raise ChatError(ErrorCode.ROOM_NOT_FOUND, "Room not found")
        return self.messages_by_room.get(room_id, [])

    def recent(self, room_id: str, limit: int = RECENT_MESSAGES_LIMIT) -> List[Message]:
        log = self._log(room_id)
        if limit <= 0:
            return []
        return list(log[-limit:])

    def all(self, room_id: str) -> List[Message]:
        return list(self._log(room_id))

    def count(self) -> int:
        return sum(len(log) for log in self.messages_by_room.values())
