# chatrooms/api/routes/root.py

from fastapi import APIRouter

router = APIRouter()


@router.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "message": "Chatrooms - real-time room coordinator",
        "version": "1.0",
        "features": ["onboarding", "bounded_rooms", "presence", "ordered_fanout"],
        "endpoints": {
            "websocket": "/ws",
            "rooms": "/api/rooms",
            "messages": "/api/rooms/{room_id}/messages",
            "health": "/health",
        },
    }
