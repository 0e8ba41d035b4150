# chatrooms/services/connection_manager.py

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Set
import asyncio
import logging

from chatrooms.core.errors import ok

logger = logging.getLogger(__name__)


class Channel(Protocol):
    """Anything that can push a JSON frame to one client (a FastAPI WebSocket in production)."""

    async def send_json(self, data: Any) -> None: ...


# ============================================================================
# CHANNEL / BROADCAST GROUP MANAGER
# ============================================================================

class ConnectionManager:
    """
    Tracks connected channels and the room broadcast groups they subscribe to.

    Subscription is a transport concern and is kept apart from room
    membership: membership is keyed by user id in the RoomRegistry, while
    this class only knows which live channels should receive a room's
    events. A dropped channel loses its subscriptions but its user stays a
    member; the client re-subscribes by joining again.

    Data Structures:
        rooms: Maps room_id -> Set of channels subscribed to that room
               Example: {"room_001": {websocket1, websocket2}}

        connection_rooms: Maps channel -> Set of room_ids it's subscribed to
                          Example: {websocket1: {"room_001", "room_ab12cd34"}}
    """

    def __init__(self, send_timeout: float = 5.0) -> None:
        """Initialize connection manager with empty data structures."""
        # Upper bound in seconds for a single push to one channel
        self.send_timeout = send_timeout

        # Map: room_id -> Set[channels]
        self.rooms: Dict[str, Set[Channel]] = {}

        # Map: channel -> Set[room_ids it's subscribed to]
        self.connection_rooms: Dict[Channel, Set[str]] = {}

    async def connect(self, channel: Channel) -> None:
        """
        Register a freshly accepted channel and tell the client we are online.

        The channel is not subscribed to any room until it creates or joins one.
        """
        self.connection_rooms[channel] = set()
        logger.info("✓ Channel connected. Total: %d", len(self.connection_rooms))
        await self._send(channel, {"type": "event", "event": "sdk:status", "payload": ok({"status": "online"})})

    def disconnect(self, channel: Channel) -> None:
        """
        Drop a channel from every broadcast group it joined.

        Room membership is untouched.
        """
        if channel not in self.connection_rooms:
            return

        for room_id in self.connection_rooms[channel]:
            if room_id in self.rooms:
                self.rooms[room_id].discard(channel)
                # Clean up empty groups from memory
                if not self.rooms[room_id]:
                    del self.rooms[room_id]

        del self.connection_rooms[channel]
        logger.info("✗ Channel disconnected. Total: %d", len(self.connection_rooms))

    def subscribe(self, channel: Channel, room_id: str) -> None:
        """Add a channel to a room's broadcast group. Subscribing twice is a no-op."""
        if channel not in self.connection_rooms:
            self.connection_rooms[channel] = set()
        self.rooms.setdefault(room_id, set()).add(channel)
        self.connection_rooms[channel].add(room_id)

    def subscribers(self, room_id: str) -> Set[Channel]:
        return set(self.rooms.get(room_id, ()))

    async def emit(
        self,
        event: str,
        payload: dict,
        room_id: Optional[str] = None,
        exclude: Optional[Channel] = None,
    ) -> None:
        """
        Deliver an event to a room's broadcast group, or to everyone.

        Args:
            event: Event name, e.g. "sdk:message:new"
            payload: Envelope to deliver ({"ok": True, "data": ...})
            room_id: Target room group; None broadcasts to every connected channel
            exclude: Channel that should not receive this event

        Error Handling:
            Sends run concurrently and each one is bounded by send_timeout,
            so a stalled client cannot hold up the others or the caller.
            A channel whose send fails or times out is disconnected; the
            failure is never raised to the caller.
        """
        if room_id is None:
            targets = set(self.connection_rooms)
        else:
            targets = self.subscribers(room_id)
        targets.discard(exclude)

        if not targets:
            logger.debug("[routing] Skipped %s: no subscribers (room=%s)", event, room_id)
            return

        frame = {"type": "event", "event": event, "payload": payload}
        logger.info("📨 Broadcasting %s to %s: %d clients", event, room_id or "all", len(targets))

        channels = list(targets)
        results = await asyncio.gather(*(self._send(channel, frame) for channel in channels))

        # Clean up failed connections
        for channel, delivered in zip(channels, results):
            if not delivered:
                self.disconnect(channel)

    async def _send(self, channel: Channel, frame: dict) -> bool:
        try:
            await asyncio.wait_for(channel.send_json(frame), timeout=self.send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning("Send timed out after %.2fs, dropping %r", self.send_timeout, channel)
            return False
        except Exception as e:
            logger.warning("Send error: %s", e)
            return False
