# chatrooms/services/room_manager.py

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import date
from typing import Dict, List, Optional, Set

from chatrooms.core.errors import ChatError, ErrorCode
from chatrooms.models.models import Room, RoomSummary
from chatrooms.services.identity_registry import IdentityRegistry, now_ms

logger = logging.getLogger(__name__)

SYSTEM_USER_ID = "system"

# ============================================================================
# ROOM REGISTRY
# ============================================================================
class RoomRegistry:
    """
    Manages room definitions and who belongs to each room.

    Everything lives in memory and disappears with the process. Each room
    also owns an asyncio.Lock; the coordinator holds it while mutating the
    room's membership or message log so that those changes, and the fanout
    that follows them, happen one at a time per room.

    Attributes:
        rooms: room_id -> Room, in creation order (seed rooms first)
        memberships: room_id -> set of user ids currently joined

    Membership only grows: there is no leave operation, and a member's
    identity stays in the set even when its connection drops.

    Usage:
        registry = RoomRegistry(identities)
        room = registry.create_room("u_123", "Standup", date.today(), 4)
        registry.join_room("u_456", room.id)
    """

    def __init__(self, identities: IdentityRegistry, seed: bool = True) -> None:
        self.identities = identities
        self.rooms: Dict[str, Room] = {}
        self.memberships: Dict[str, Set[str]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        if seed:
            self.create_default_rooms()

    def create_default_rooms(self) -> None:
        """Create the rooms every fresh process starts with."""
        today = date.today().isoformat()
        defaults = [
            {"id": "room_001", "name": "Support Room", "max_users": 10},
            {"id": "room_002", "name": "Sales Room", "max_users": 5},
        ]

        for rd in defaults:
            self._store(
                Room(
                    id=rd["id"],
                    name=rd["name"],
                    start_date=today,
                    max_users=rd["max_users"],
                    created_at=now_ms(),
                    created_by_user_id=SYSTEM_USER_ID,
                )
            )

        logger.info("✓ Created %d default rooms", len(defaults))

    def _store(self, room: Room) -> None:
        self.rooms[room.id] = room
        self.memberships[room.id] = set()
        self._locks[room.id] = asyncio.Lock()

    def _new_id(self) -> str:
        while True:
            room_id = f"room_{uuid.uuid4().hex[:8]}"
            if room_id not in self.rooms:
                return room_id

    def create_room(self, creator_id: str, name: str, start_date: date, max_users: int) -> Room:
        """
        Create a room and make its creator the first member.

        Args:
            creator_id: Existing user id
            name: Validated, trimmed room name
            start_date: Validated calendar day
            max_users: Capacity, already clamped

        Raises:
            ChatError: USER_NOT_FOUND if the creator does not exist
        """
        if not self.identities.exists(creator_id):
            raise ChatError(ErrorCode.USER_NOT_FOUND, "User not found")

        room = Room(
            id=self._new_id(),
            name=name,
            start_date=start_date.isoformat(),
            max_users=max_users,
            created_at=now_ms(),
            created_by_user_id=creator_id,
        )
        self._store(room)
        self.memberships[room.id].add(creator_id)
        logger.info("✓ Created room: %s (%s, capacity %d)", room.name, room.id, room.max_users)
        return room

    def join_room(self, user_id: str, room_id: str) -> Room:
        """
        Add a user to a room's membership.

        Re-joining is idempotent and always succeeds, even at capacity.

        Raises:
            ChatError: USER_NOT_FOUND, ROOM_NOT_FOUND or ROOM_FULL
        """
        if not self.identities.exists(user_id):
            raise ChatError(ErrorCode.USER_NOT_FOUND, "User not found")
        room = self.get_room(room_id)
        if not room:
            raise ChatError(ErrorCode.ROOM_NOT_FOUND, "Room not found")

        members = self.memberships[room.id]
        if user_id not in members and len(members) >= room.max_users:
            raise ChatError(ErrorCode.ROOM_FULL, "Room is full")

        members.add(user_id)
        logger.info("→ %s joined '%s' (%d/%d members)", user_id, room.name, len(members), room.max_users)
        return room

    def get_room(self, room_id: Optional[str]) -> Optional[Room]:
        return self.rooms.get(room_id) if room_id else None

    def exists(self, room_id: Optional[str]) -> bool:
        return room_id in self.rooms

    def list_rooms(self) -> List[RoomSummary]:
        return [
            RoomSummary(
                id=room.id,
                name=room.name,
                start_date=room.start_date,
                max_users=room.max_users,
                members=len(self.memberships[room.id]),
            )
            for room in self.rooms.values()
        ]

    def members(self, room_id: str) -> Set[str]:
        return set(self.memberships.get(room_id, ()))

    def is_member(self, room_id: str, user_id: str) -> bool:
        return user_id in self.memberships.get(room_id, ())

    def member_count(self, room_id: str) -> int:
        return len(self.memberships.get(room_id, ()))

    def lock_for(self, room_id: str) -> asyncio.Lock:
        """The lock serializing mutations of one room. The room must exist."""
        return self._locks[room_id]
