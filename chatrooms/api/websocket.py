# chatrooms/api/websocket.py

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from chatrooms.core import state
from chatrooms.core.config import settings
from chatrooms.core.errors import ErrorCode, err

logger = logging.getLogger(__name__)

router = APIRouter()

# ============================================================================
# WEBSOCKET ENDPOINT
# ============================================================================

@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for real-time bidirectional communication.

    Protocol:
    =========

    Client -> Server Requests:
    --------------------------
    Every request gets exactly one acknowledgement carrying an envelope.

        {"action": "sdk:room:join", "requestId": 7,
         "payload": {"apiKey": "demo-key", "userId": "u_...", "roomId": "room_001"}}

        Response:
        {"type": "ack", "action": "sdk:room:join", "requestId": 7,
         "response": {"ok": true, "data": {"room": {...}, "recentMessages": [...]}}}

    Actions: sdk:room:list, sdk:user:create, sdk:room:create,
             sdk:room:join, sdk:message:send

    Server -> Client Events:
    ------------------------
        {"type": "event", "event": "sdk:message:new", "payload": {"ok": true, "data": {...}}}

    Events: sdk:status (on connect), sdk:room:created (everyone),
            sdk:presence:joined (other channels in the room),
            sdk:message:new (every channel in the room)

    Error:
        {"type": "error", "error": {"code": "BAD_REQUEST", "message": "Invalid JSON"}}

    Lifecycle:
    ==========
    1. Origin checked against ALLOWED_ORIGINS, connection accepted
    2. Client creates a user, then creates or joins rooms
    3. Client receives events from the rooms its channel subscribed to
    4. On disconnect the channel leaves every broadcast group; the user
       stays a member and must join again after reconnecting
    """
    origin = websocket.headers.get("origin")
    if not settings.origin_allowed(origin):
        logger.warning("Rejected WebSocket from origin %s", origin)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    await state.connection_manager.connect(websocket)
    handlers = state.coordinator.handlers()

    try:
        while True:
            data = await websocket.receive_text()

            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json(
                    {"type": "error", "error": err(ErrorCode.BAD_REQUEST, "Invalid JSON")["error"]}
                )
                continue

            if not isinstance(message, dict):
                await websocket.send_json(
                    {"type": "error", "error": err(ErrorCode.BAD_REQUEST, "Frame must be an object")["error"]}
                )
                continue

            action = message.get("action")
            logger.info("Websocket input: Action: %s", action)

            handler = handlers.get(action)
            if handler is None:
                response = err(ErrorCode.BAD_REQUEST, f"Unknown action: {action}")
            else:
                response = await handler(websocket, message.get("payload"))

            await websocket.send_json(
                {
                    "type": "ack",
                    "action": action,
                    "requestId": message.get("requestId"),
                    "response": response,
                }
            )

    except WebSocketDisconnect:
        state.connection_manager.disconnect(websocket)
    except Exception as e:
        logger.error("WebSocket error: %s", e)
        state.connection_manager.disconnect(websocket)
