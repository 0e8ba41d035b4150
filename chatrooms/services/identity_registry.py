# chatrooms/services/identity_registry.py

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from chatrooms.models.models import Gender, User

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def canonical_instant(value: datetime) -> str:
    """UTC ISO form with millisecond precision, e.g. 2000-01-01T00:00:00.000Z."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class IdentityRegistry:
    """
    In-memory store of onboarded participants.

    Identities are created once and never mutated or removed for the
    lifetime of the process. Callers validate the fields first; this class
    only normalizes and stores them.
    """

    def __init__(self) -> None:
        self.users: Dict[str, User] = {}

    def _new_id(self) -> str:
        while True:
            user_id = f"u_{uuid.uuid4().hex[:10]}"
            if user_id not in self.users:
                return user_id

    def create_identity(self, name: str, email: str, dob: datetime, gender: Gender = Gender.MALE) -> User:
        user = User(
            id=self._new_id(),
            name=name.strip(),
            email=email.strip().lower(),
            dob=canonical_instant(dob),
            gender=gender,
            created_at=now_ms(),
        )
        self.users[user.id] = user
        logger.info("✓ Created user %s (%s)", user.id, user.name)
        return user

    def exists(self, user_id: Optional[str]) -> bool:
        return user_id in self.users

    def get(self, user_id: Optional[str]) -> Optional[User]:
        return self.users.get(user_id) if user_id else None

    def count(self) -> int:
        return len(self.users)
