import asyncio
import pytest
from typing import Any, List

from chatrooms.services.connection_manager import ConnectionManager
from chatrooms.services.coordinator import SessionCoordinator
from chatrooms.services.identity_registry import IdentityRegistry
from chatrooms.services.message_log import MessageLog
from chatrooms.services.room_manager import RoomRegistry


API_KEY = "demo-key"


class FakeChannel:
    """Channel stand-in that records every frame pushed to it"""

    def __init__(self, name: str = "channel", fail: bool = False):
        self.name = name
        self.fail = fail
        self.sent: List[Any] = []

    async def send_json(self, data: Any) -> None:
        if self.fail:
            raise RuntimeError(f"{self.name} is gone")
        self.sent.append(data)

    def events(self, name: str) -> List[dict]:
        return [frame["payload"] for frame in self.sent if frame.get("event") == name]

    def __repr__(self) -> str:
        return f"FakeChannel({self.name})"


class HangingChannel(FakeChannel):
    """Channel whose pushes never complete, like a client that stopped reading"""

    def __init__(self, name: str = "hanging"):
        super().__init__(name)
        self.attempts = 0

    async def send_json(self, data: Any) -> None:
        self.attempts += 1
        await asyncio.Event().wait()


@pytest.fixture
def identities() -> IdentityRegistry:
    return IdentityRegistry()


@pytest.fixture
def rooms(identities) -> RoomRegistry:
    return RoomRegistry(identities)


@pytest.fixture
def messages(rooms, identities) -> MessageLog:
    return MessageLog(rooms, identities)


@pytest.fixture
def broadcaster() -> ConnectionManager:
    # Short enough that a stalled channel is dropped quickly in tests
    return ConnectionManager(send_timeout=0.05)


@pytest.fixture
def coordinator(identities, rooms, messages, broadcaster) -> SessionCoordinator:
    return SessionCoordinator(
        identities=identities,
        rooms=rooms,
        messages=messages,
        broadcaster=broadcaster,
        api_keys=[API_KEY],
    )


def user_payload(**overrides) -> dict:
    payload = {
        "apiKey": API_KEY,
        "name": "Alice",
        "email": "alice@example.com",
        "dob": "2000-01-01",
        "agreedToTerms": True,
    }
    payload.update(overrides)
    return payload
