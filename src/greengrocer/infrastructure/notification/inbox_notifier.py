"""Notifier that drops messages into the ``messages`` table.

Owners, customers and carriers read their inbox through ``list_messages``.
A message without ``recipient_id`` is addressed to everyone in the role.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy import Engine, insert, or_, select

from greengrocer.domain.notifier import Notifier, RecipientRole
from greengrocer.infrastructure.persistence.schema import (
    from_db_time,
    messages,
    to_db_time,
    transaction,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Message:
    id: int
    recipient_role: RecipientRole
    recipient_id: str | None
    subject: str
    body: str
    created_at: datetime


class InboxNotifier(Notifier):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def notify(
        self,
        recipient_role: RecipientRole,
        subject: str,
        body: str,
        recipient_id: str | None = None,
    ) -> None:
        with transaction(self._engine) as conn:
            conn.execute(
                insert(messages).values(
                    recipient_role=recipient_role.value,
                    recipient_id=recipient_id,
                    subject=subject,
                    body=body,
                    created_at=to_db_time(datetime.now(timezone.utc)),
                )
            )
        logger.info(
            "Message sent",
            recipient_role=recipient_role.value,
            recipient_id=recipient_id,
            subject=subject,
        )

    def list_messages(
        self, recipient_role: RecipientRole, recipient_id: str | None = None
    ) -> list[Message]:
        """Newest first.  Role-wide messages are included for a named recipient."""
        query = select(messages).where(messages.c.recipient_role == recipient_role.value)
        if recipient_id is not None:
            query = query.where(
                or_(messages.c.recipient_id == recipient_id, messages.c.recipient_id.is_(None))
            )
        query = query.order_by(messages.c.created_at.desc(), messages.c.id.desc())
        with transaction(self._engine) as conn:
            rows = conn.execute(query).all()
        return [
            Message(
                id=row.id,
                recipient_role=RecipientRole(row.recipient_role),
                recipient_id=row.recipient_id,
                subject=row.subject,
                body=row.body,
                created_at=from_db_time(row.created_at),
            )
            for row in rows
        ]
