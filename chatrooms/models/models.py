# chatrooms/models/models.py
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class User(WireModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    dob: str
    gender: Gender
    created_at: int


class Room(WireModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    start_date: str
    max_users: int
    created_at: int
    created_by_user_id: str


class RoomSummary(WireModel):
    id: str
    name: str
    start_date: str
    max_users: int
    members: int = 0


class Message(WireModel):
    model_config = ConfigDict(frozen=True)

    id: str
    room_id: str
    sender_user_id: str
    sender_name: str
    text: str
    created_at: int


# ============================================================================
# REQUEST PAYLOADS
# ============================================================================
# Fields stay optional: missing values are reported with their domain error
# code (INVALID_NAME, TERMS_REQUIRED, ...) rather than a schema error.

class CreateUserRequest(WireModel):
    api_key: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    dob: Optional[str] = None
    gender: Optional[Gender] = None
    # Only a literal JSON true counts as agreement
    agreed_to_terms: Any = False


class CreateRoomRequest(WireModel):
    api_key: Optional[str] = None
    user_id: Optional[str] = None
    room_name: Optional[str] = None
    start_date: Optional[str] = None
    max_users: Optional[int] = None


class JoinRoomRequest(WireModel):
    api_key: Optional[str] = None
    user_id: Optional[str] = None
    room_id: Optional[str] = None


class SendMessageRequest(WireModel):
    api_key: Optional[str] = None
    user_id: Optional[str] = None
    room_id: Optional[str] = None
    text: Optional[Any] = None
