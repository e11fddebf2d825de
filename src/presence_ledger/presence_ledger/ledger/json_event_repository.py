from __future__ import annotations

import logging
import time
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ..common.datetime_utils import end_of_day, format_timestamp, parse_timestamp, start_of_day
from ..core.constants import EVENT_SENSITIVE_FIELDS
from ..core.enums import EventKind
from ..security.cipher import CipherSession
from ..storage.json_store import JsonCollectionStore
from .model import Event
from .repository import EventRepository

logger = logging.getLogger(__name__)


def next_event_id(current_max: int) -> int:
    """Creation-time id in milliseconds, bumped past ``current_max`` when the clock collides."""
    return max(int(time.time() * 1000), current_max + 1)


def row_to_event(row: Dict[str, Any]) -> Optional[Event]:
    """Decode a stored row; None when the row cannot be read (bad timestamp, kind or id)."""
    at = parse_timestamp(row.get("at"))
    if at is None:
        return None
    try:
        kind = EventKind(row.get("kind"))
        event_id = int(row["event_id"]) if row.get("event_id") is not None else None
    except (KeyError, TypeError, ValueError):
        return None
    identity_id = row.get("identity_id")
    if not identity_id:
        return None
    return Event(
        event_id=event_id,
        identity_id=str(identity_id),
        display_name=row.get("display_name") or "",
        kind=kind,
        at=at,
        synthetic=bool(row.get("synthetic", False)),
        pending_id=row.get("pending_id") or None,
        pending=bool(row.get("pending", False)),
    )


def event_to_row(event: Event) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "event_id": event.event_id,
        "identity_id": event.identity_id,
        "display_name": event.display_name,
        "kind": event.kind.value,
        "at": format_timestamp(event.at),
        "synthetic": event.synthetic,
    }
    if event.pending_id:
        row["pending_id"] = event.pending_id
        row["pending"] = event.pending
    return row


def ordered(events: Iterable[Event]) -> List[Event]:
    return sorted(events, key=lambda e: e.sort_key)


class JsonEventRepository(EventRepository):
    """Event ledger kept as one JSON array (``events.json``).

    Rows that fail to decode are skipped when reading but written back
    untouched, so a bad hand edit never costs data.
    """

    def __init__(self, path: Path, *, session_provider: Optional[Callable[[], CipherSession]] = None):
        self.store = JsonCollectionStore(
            path,
            sensitive_fields=EVENT_SENSITIVE_FIELDS,
            session_provider=session_provider,
        )

    def _events(self, rows: Iterable[Dict[str, Any]]) -> List[Event]:
        events = []
        skipped = 0
        for row in rows:
            event = row_to_event(row)
            if event is None:
                skipped += 1
                continue
            events.append(event)
        if skipped:
            logger.warning("Skipped %d malformed event rows in %s", skipped, self.store.path.name)
        return ordered(events)

    def append(self, event: Event) -> Event:
        with self.store.transaction() as rows:
            if event.event_id is None:
                current_max = max((int(r["event_id"]) for r in rows if _has_int_id(r)), default=0)
                event = replace(event, event_id=next_event_id(current_max))
            rows.append(event_to_row(event))
        logger.info(
            "Event %s stored: %s %s at %s%s",
            event.event_id,
            event.identity_id,
            event.kind.value,
            format_timestamp(event.at),
            " (synthetic)" if event.synthetic else "",
        )
        return event

    def all(self) -> Sequence[Event]:
        return self._events(self.store.load())

    def for_identity(self, identity_id: str) -> Sequence[Event]:
        return [e for e in self.all() if e.identity_id == identity_id]

    def for_day(self, day: date) -> Sequence[Event]:
        return self.for_range(start_of_day(day), end_of_day(day))

    def for_range(self, start: datetime, end: datetime) -> Sequence[Event]:
        return [e for e in self.all() if start <= e.at <= end]

    def remove(self, event_id: int) -> bool:
        with self.store.transaction() as rows:
            kept = [r for r in rows if not (_has_int_id(r) and int(r["event_id"]) == event_id)]
            removed = len(kept) != len(rows)
            rows[:] = kept
        if removed:
            logger.info("Event %s removed", event_id)
        return removed

    def update(self, match: Callable[[Event], bool], *, at: datetime) -> Sequence[Event]:
        updated: List[Event] = []
        with self.store.transaction() as rows:
            for row in rows:
                event = row_to_event(row)
                if event is None or not match(event):
                    continue
                row["at"] = format_timestamp(at)
                if "pending" in row:
                    row["pending"] = False
                updated.append(replace(event, at=at, pending=False))
        if updated:
            logger.info("Updated %d pending events to %s", len(updated), format_timestamp(at))
        return ordered(updated)


def _has_int_id(row: Dict[str, Any]) -> bool:
    try:
        int(row.get("event_id"))
    except (TypeError, ValueError):
        return False
    return True
