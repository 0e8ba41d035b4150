# chatrooms/main.py

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chatrooms.core.config import settings
from chatrooms.core.errors import ChatError, err
from chatrooms.core.logging import setup_logging, get_logger
from chatrooms.api.routes import root, health, rooms
from chatrooms.api import websocket as websocket_module

# Configure logging first
setup_logging()
logger = get_logger(__name__)

# FastAPI app
app = FastAPI(title="Chatrooms - Real-time Room Coordinator")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# REST routes
app.include_router(root.router)
app.include_router(health.router)
app.include_router(rooms.router)

# WebSocket routes
app.include_router(websocket_module.router)


@app.exception_handler(ChatError)
async def chat_error_handler(request: Request, exc: ChatError):
    return JSONResponse(status_code=exc.code.http_status, content=err(exc.code, exc.message))


@app.on_event("startup")
async def startup_event():
    logger.info("🚀 Application starting")
    logger.info("Allowed origins: %s", ", ".join(settings.ALLOWED_ORIGINS))
    logger.info("API keys configured: %d", len(settings.API_KEYS))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("chatrooms.main:app", host=settings.HOST, port=settings.PORT)
