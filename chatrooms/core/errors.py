# chatrooms/core/errors.py

from __future__ import annotations

from enum import Enum
from typing import Any, Dict


class ErrorCode(str, Enum):
    """Every error code a client can receive, with the HTTP status used by the REST surface."""

    UNAUTHORIZED = "UNAUTHORIZED"
    BAD_REQUEST = "BAD_REQUEST"
    TERMS_REQUIRED = "TERMS_REQUIRED"
    INVALID_NAME = "INVALID_NAME"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_DOB = "INVALID_DOB"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INVALID_ROOM_NAME = "INVALID_ROOM_NAME"
    INVALID_START_DATE = "INVALID_START_DATE"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    ROOM_FULL = "ROOM_FULL"
    FORBIDDEN = "FORBIDDEN"
    EMPTY_MESSAGE = "EMPTY_MESSAGE"
    MESSAGE_TOO_LONG = "MESSAGE_TOO_LONG"
    INTERNAL = "INTERNAL"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS.get(self, 400)


_HTTP_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.USER_NOT_FOUND: 404,
    ErrorCode.ROOM_NOT_FOUND: 404,
    ErrorCode.ROOM_FULL: 409,
    ErrorCode.INTERNAL: 500,
}


class ChatError(Exception):
    """A domain failure reported back to the caller as an error envelope."""

    def __init__(self, code: ErrorCode, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code.value}: {message}")

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "message": self.message}


def ok(data: Any) -> Dict[str, Any]:
    return {"ok": True, "data": data}


def err(code: ErrorCode, message: str) -> Dict[str, Any]:
    return {"ok": False, "error": {"code": code.value, "message": message}}
