# chatrooms/services/coordinator.py

from __future__ import annotations

import functools
import logging
from datetime import date
from typing import Any, Awaitable, Callable, Dict, Iterable, Type, TypeVar

from pydantic import BaseModel, ValidationError

from chatrooms.core.errors import ChatError, ErrorCode, err, ok
from chatrooms.models.models import (
    CreateRoomRequest,
    CreateUserRequest,
    Gender,
    JoinRoomRequest,
    SendMessageRequest,
)
from chatrooms.services import validation
from chatrooms.services.connection_manager import Channel, ConnectionManager
from chatrooms.services.identity_registry import IdentityRegistry
from chatrooms.services.message_log import RECENT_MESSAGES_LIMIT, MessageLog
from chatrooms.services.room_manager import RoomRegistry

logger = logging.getLogger(__name__)

Envelope = Dict[str, Any]
Operation = Callable[..., Awaitable[Envelope]]
RequestT = TypeVar("RequestT", bound=BaseModel)

ROOM_CREATED = "sdk:room:created"
PRESENCE_JOINED = "sdk:presence:joined"
MESSAGE_NEW = "sdk:message:new"


def operation(func: Operation) -> Operation:
    """
    Wrap a coordinator operation so that it always returns an envelope.

    ChatError becomes {"ok": False, "error": {...}} with its code; anything
    else is logged and reported as INTERNAL.
    """

    @functools.wraps(func)
    async def wrapper(self: "SessionCoordinator", channel: Channel, payload: Any) -> Envelope:
        try:
            if not isinstance(payload, dict):
                raise ChatError(ErrorCode.BAD_REQUEST, "Payload required")
            self._authorize(payload.get("apiKey"))
            return ok(await func(self, channel, payload))
        except ChatError as e:
            logger.info("%s rejected: %s", func.__name__, e)
            return err(e.code, e.message)
        except Exception as e:
            logger.exception("%s failed", func.__name__)
            return err(ErrorCode.INTERNAL, str(e) or "Unknown error")

    return wrapper


class SessionCoordinator:
    """
    Runs the onboarding → room → messaging flow on behalf of a channel.

    Each public operation takes the calling channel and the raw request
    payload and returns an acknowledgement envelope. The apiKey is checked
    before anything else; the remaining checks run in a fixed order and the
    first failure is reported. Mutations of a room, and the fanout they
    trigger, run under that room's lock.
    """

    def __init__(
        self,
        identities: IdentityRegistry,
        rooms: RoomRegistry,
        messages: MessageLog,
        broadcaster: ConnectionManager,
        api_keys: Iterable[str],
    ) -> None:
        self.identities = identities
        self.rooms = rooms
        self.messages = messages
        self.broadcaster = broadcaster
        self.api_keys = set(api_keys)

    def _authorize(self, api_key: Any) -> None:
        if not isinstance(api_key, str) or api_key not in self.api_keys:
            raise ChatError(ErrorCode.UNAUTHORIZED, "Invalid apiKey")

    @staticmethod
    def _parse(model: Type[RequestT], payload: Dict[str, Any]) -> RequestT:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in error["loc"]) for error in e.errors())
            raise ChatError(ErrorCode.BAD_REQUEST, f"Invalid fields: {fields}") from e

    @operation
    async def list_rooms(self, channel: Channel, payload: Dict[str, Any]) -> list:
        return [summary.to_wire() for summary in self.rooms.list_rooms()]

    @operation
    async def create_user(self, channel: Channel, payload: Dict[str, Any]) -> dict:
        request = self._parse(CreateUserRequest, payload)
        if request.agreed_to_terms is not True:
            raise ChatError(ErrorCode.TERMS_REQUIRED, "Must agree to terms")

        name = validation.validate_display_name(request.name)
        email = validation.validate_email(request.email)
        dob = validation.validate_adult(request.dob)

        user = self.identities.create_identity(name, email, dob, request.gender or Gender.MALE)
        return {"user": user.to_wire()}

    @operation
    async def create_room(self, channel: Channel, payload: Dict[str, Any]) -> dict:
        request = self._parse(CreateRoomRequest, payload)
        if not self.identities.exists(request.user_id):
            raise ChatError(ErrorCode.USER_NOT_FOUND, "User not found")

        name = validation.validate_room_name(request.room_name)
        if request.start_date:
            start_date = validation.validate_start_date(request.start_date)
        else:
            start_date = date.today()
        max_users = validation.clamp_max_members(request.max_users)

        room = self.rooms.create_room(request.user_id, name, start_date, max_users)
        self.broadcaster.subscribe(channel, room.id)

        # Nobody is subscribed to the new room yet, so announce it to everyone.
        data = {"room": room.to_wire()}
        await self.broadcaster.emit(ROOM_CREATED, ok(data))
        return data

    @operation
    async def join_room(self, channel: Channel, payload: Dict[str, Any]) -> dict:
        request = self._parse(JoinRoomRequest, payload)
        if not self.identities.exists(request.user_id):
            raise ChatError(ErrorCode.USER_NOT_FOUND, "User not found")
        if not self.rooms.exists(request.room_id):
            raise ChatError(ErrorCode.ROOM_NOT_FOUND, "Room not found")

        async with self.rooms.lock_for(request.room_id):
            room = self.rooms.join_room(request.user_id, request.room_id)
            self.broadcaster.subscribe(channel, room.id)
            recent = self.messages.recent(room.id, RECENT_MESSAGES_LIMIT)
            await self.broadcaster.emit(
                PRESENCE_JOINED,
                ok({"userId": request.user_id, "roomId": room.id}),
                room_id=room.id,
                exclude=channel,
            )

        return {"room": room.to_wire(), "recentMessages": [m.to_wire() for m in recent]}

    @operation
    async def send_message(self, channel: Channel, payload: Dict[str, Any]) -> dict:
        request = self._parse(SendMessageRequest, payload)
        if not self.identities.exists(request.user_id):
            raise ChatError(ErrorCode.USER_NOT_FOUND, "User not found")
        if not self.rooms.exists(request.room_id):
            raise ChatError(ErrorCode.ROOM_NOT_FOUND, "Room not found")

        async with self.rooms.lock_for(request.room_id):
            message = self.messages.append(request.room_id, request.user_id, request.text)
            data = {"message": message.to_wire()}
            await self.broadcaster.emit(MESSAGE_NEW, ok(data), room_id=message.room_id)

        return data

    def handlers(self) -> Dict[str, Callable[[Channel, Any], Awaitable[Envelope]]]:
        """Action name -> operation, as used by the WebSocket endpoint."""
        return {
            "sdk:room:list": self.list_rooms,
            "sdk:user:create": self.create_user,
            "sdk:room:create": self.create_room,
            "sdk:room:join": self.join_room,
            "sdk:message:send": self.send_message,
        }
