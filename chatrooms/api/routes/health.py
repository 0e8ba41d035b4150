# chatrooms/api/routes/health.py

from datetime import datetime, timezone

from fastapi import APIRouter

from chatrooms.core import state

router = APIRouter()

@router.get("/health")
async def health():
    """
    Health check endpoint.

    Returns current system status with connection, room, user and message
    counts. Used by container health checks and monitoring.
    """
    uptime_seconds = (datetime.now(timezone.utc) - state.app_start_time).total_seconds()
    return {
        "ok": True,
        "uptime_seconds": round(uptime_seconds, 1),
        "connections": len(state.connection_manager.connection_rooms),
        "rooms": len(state.room_registry.rooms),
        "active_rooms_with_subscribers": len(state.connection_manager.rooms),
        "users": state.identities.count(),
        "messages": state.message_log.count(),
    }
