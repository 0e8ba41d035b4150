# chatrooms/services/validation.py
"""
Input validation for onboarding and room creation.

Every function here is pure: it either returns the (possibly normalized)
value or raises ChatError with the code the client should see.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any, Optional

from chatrooms.core.errors import ChatError, ErrorCode

NAME_MAX_LENGTH = 30
ROOM_NAME_MAX_LENGTH = 50
MIN_AGE_YEARS = 18
MIN_ROOM_MEMBERS = 2
MAX_ROOM_MEMBERS = 10

NAME_PATTERN = re.compile(r"[A-Za-z \t\n\r\f\v]+")
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse a calendar day or an ISO-8601 timestamp into an aware datetime.

    Naive values are taken as UTC. Returns None for anything unparseable.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def validate_display_name(name: Any) -> str:
    if not isinstance(name, str) or not name or len(name) > NAME_MAX_LENGTH:
        raise ChatError(ErrorCode.INVALID_NAME, "Invalid name")
    if not NAME_PATTERN.fullmatch(name) or not name.isascii():
        raise ChatError(ErrorCode.INVALID_NAME, "Name must be letters only")
    return name


def validate_email(email: Any) -> str:
    if not isinstance(email, str) or not EMAIL_PATTERN.fullmatch(email):
        raise ChatError(ErrorCode.INVALID_EMAIL, "Invalid email")
    return email


def is_adult(birth: date, today: date) -> bool:
    # Calendar arithmetic: the 18th birthday itself counts.
    years = today.year - birth.year
    if years != MIN_AGE_YEARS:
        return years > MIN_AGE_YEARS
    months = today.month - birth.month
    if months != 0:
        return months > 0
    return today.day >= birth.day


def validate_adult(dob: Any, today: Optional[date] = None) -> datetime:
    parsed = parse_date(dob)
    if parsed is None or not is_adult(parsed.date(), today or date.today()):
        raise ChatError(ErrorCode.INVALID_DOB, "Must be at least 18")
    return parsed


def validate_room_name(name: Any) -> str:
    room_name = (name or "").strip()
    if not room_name:
        raise ChatError(ErrorCode.INVALID_ROOM_NAME, "Room name required")
    if len(room_name) > ROOM_NAME_MAX_LENGTH:
        raise ChatError(ErrorCode.INVALID_ROOM_NAME, f"Max {ROOM_NAME_MAX_LENGTH} chars")
    return room_name


def validate_start_date(value: Any, today: Optional[date] = None) -> date:
    parsed = parse_date(value)
    if parsed is None or parsed.date() < (today or date.today()):
        raise ChatError(ErrorCode.INVALID_START_DATE, "Start date cannot be in the past")
    return parsed.date()


def clamp_max_members(requested: Optional[int]) -> int:
    if requested is None:
        requested = MIN_ROOM_MEMBERS
    return max(MIN_ROOM_MEMBERS, min(MAX_ROOM_MEMBERS, requested))
