"""Shopping sessions and the carts scoped to them.

Replaces a process-wide cart singleton: every session owns its own cart,
looked up by session id, and logging out throws the cart away.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from greengrocer.domain.model.cart import Cart


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Session:
    user_id: str
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)


class InMemoryCartStore:

    def __init__(self) -> None:
        self._carts: dict[str, Cart] = {}

    def get(self, session: Session) -> Cart:
        """Return the session's cart, creating an empty one on first use."""
        return self._carts.setdefault(session.session_id, Cart())

    def discard(self, session: Session) -> None:
        self._carts.pop(session.session_id, None)

    def logout(self, session: Session) -> None:
        self.get(session).clear()
        self.discard(session)
