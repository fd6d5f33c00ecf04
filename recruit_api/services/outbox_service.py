"""Outbox writes for asynchronous side effects (notifications)."""

import logging

from sqlalchemy.orm import Session

from recruit_api.db.enums import OutboxEventType
from recruit_api.db.models import OutboxEvent

logger = logging.getLogger(__name__)


def publish_event(db: Session, event_type: OutboxEventType, payload: dict) -> OutboxEvent:
    """
    Append an event to the outbox in the caller's transaction.

    The event becomes visible to consumers only when the caller commits.
    """
    event = OutboxEvent(event_type=event_type.value, payload=payload)
    db.add(event)
    db.flush()
    logger.debug("Published %s event to outbox", event_type.value)
    return event
