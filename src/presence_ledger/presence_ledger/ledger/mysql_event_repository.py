from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence

from ..common.datetime_utils import end_of_day, start_of_day
from ..core.constants import EVENT_SENSITIVE_FIELDS
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..security.cipher import CipherSession, decrypt_fields, encrypt_fields, marker_for
from .json_event_repository import next_event_id, row_to_event
from .model import Event
from .repository import EventRepository

logger = logging.getLogger(__name__)

_COLUMNS = "event_id, identity_id, display_name, display_name_encrypted, kind, at, synthetic, pending_id, pending"


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, session_provider: Optional[Callable[[], CipherSession]] = None):
        self._conn_factory = conn_factory
        self._session_provider = session_provider or CipherSession

    def _decode(self, rows) -> List[Event]:
        session = self._session_provider()
        events = []
        for row in rows:
            event = row_to_event(decrypt_fields(row, EVENT_SENSITIVE_FIELDS, session))
            if event is None:
                logger.warning("Skipped malformed event row %s", row.get("event_id"))
                continue
            events.append(event)
        return events

    def _select(self, where: str = "", params: tuple = ()) -> List[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events {where} ORDER BY at, event_id", params)
            return self._decode(fetchall(cur))

    def append(self, event: Event) -> Event:
        with db_cursor(self._conn_factory) as (_, cur):
            if event.event_id is None:
                cur.execute("SELECT COALESCE(MAX(event_id), 0) AS max_id FROM events")
                row = fetchone(cur) or {}
                event = replace(event, event_id=next_event_id(int(row.get("max_id") or 0)))

            stored = encrypt_fields({"display_name": event.display_name}, EVENT_SENSITIVE_FIELDS, self._session_provider())
            cur.execute(
                f"INSERT INTO events({_COLUMNS}) VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)",
                (
                    event.event_id,
                    event.identity_id,
                    stored["display_name"],
                    int(bool(stored.get(marker_for("display_name")))),
                    event.kind.value,
                    event.at,
                    int(event.synthetic),
                    event.pending_id,
                    int(event.pending),
                ),
            )
        logger.info("Event %s stored: %s %s", event.event_id, event.identity_id, event.kind.value)
        return event

    def all(self) -> Sequence[Event]:
        return self._select()

    def for_identity(self, identity_id: str) -> Sequence[Event]:
        return self._select("WHERE identity_id=%s", (identity_id,))

    def for_day(self, day: date) -> Sequence[Event]:
        return self.for_range(start_of_day(day), end_of_day(day))

    def for_range(self, start: datetime, end: datetime) -> Sequence[Event]:
        return self._select("WHERE at BETWEEN %s AND %s", (start, end))

    def remove(self, event_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM events WHERE event_id=%s", (event_id,))
            return cur.rowcount > 0

    def update(self, match: Callable[[Event], bool], *, at: datetime) -> Sequence[Event]:
        targets = [e for e in self._select() if match(e)]
        if not targets:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            for event in targets:
                cur.execute("UPDATE events SET at=%s, pending=0 WHERE event_id=%s", (at, event.event_id))
        return [replace(e, at=at, pending=False) for e in targets]
