# chatrooms/api/routes/rooms.py

from fastapi import APIRouter

from chatrooms.core import state
from chatrooms.core.errors import ok

router = APIRouter(prefix="/api")

# ============================================================================
# READ-ONLY ROOM ENDPOINTS
# ============================================================================

@router.get("/rooms")
async def list_rooms():
    """
    List all rooms, seed rooms first, with their current member counts.

    Returns:
        dict: {"ok": true, "data": [{id, name, startDate, maxUsers, members}]}
    """
    return ok([summary.to_wire() for summary in state.room_registry.list_rooms()])


@router.get("/rooms/{room_id}/messages")
async def list_messages(room_id: str):
    """
    Full message history of a room, oldest first.

    Raises:
        ChatError: ROOM_NOT_FOUND, rendered as a 404 error envelope
    """
    return ok([message.to_wire() for message in state.message_log.all(room_id)])
