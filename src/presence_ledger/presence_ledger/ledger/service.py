from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Sequence

from ..common.datetime_utils import to_local_naive
from ..core.exceptions import NotFoundError, ValidationError
from .model import Event
from .repository import EventRepository

logger = logging.getLogger(__name__)


class LedgerService:
    """Read access to the event ledger plus the admin-only edits (delete, back-fill)."""

    def __init__(self, events: EventRepository):
        self._events = events

    def all_events(self) -> Sequence[Event]:
        return self._events.all()

    def events_for_range(self, start: datetime, end: datetime) -> Sequence[Event]:
        start, end = to_local_naive(start), to_local_naive(end)
        if end < start:
            raise ValidationError("Range end must not be before its start")
        return self._events.for_range(start, end)

    def events_for_day(self, day: date) -> Sequence[Event]:
        return self._events.for_day(day)

    def events_for_identity(self, identity_id: str) -> Sequence[Event]:
        return self._events.for_identity(identity_id)

    def delete_event(self, event_id: int) -> None:
        if not self._events.remove(int(event_id)):
            logger.warning("Event not found for deletion: %s", event_id)
            raise NotFoundError(f"Event {event_id} not found")
        logger.info("Event deleted by admin: %s", event_id)

    def append_raw(self, event: Event) -> Event:
        """Store ``event`` without the alternation check (imports, back-fills)."""
        return self._events.append(event)
