# chatrooms/core/state.py
from __future__ import annotations

from datetime import datetime, timezone

from chatrooms.core.config import settings
from chatrooms.services.connection_manager import ConnectionManager
from chatrooms.services.coordinator import SessionCoordinator
from chatrooms.services.identity_registry import IdentityRegistry
from chatrooms.services.message_log import MessageLog
from chatrooms.services.room_manager import RoomRegistry

# Process-wide services, built once at import and handed to the coordinator
identities = IdentityRegistry()
room_registry = RoomRegistry(identities)
message_log = MessageLog(room_registry, identities)
connection_manager = ConnectionManager(send_timeout=settings.SEND_TIMEOUT_SECONDS)
coordinator = SessionCoordinator(
    identities=identities,
    rooms=room_registry,
    messages=message_log,
    broadcaster=connection_manager,
    api_keys=settings.API_KEYS,
)

app_start_time: datetime = datetime.now(timezone.utc)
