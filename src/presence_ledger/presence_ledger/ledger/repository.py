from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Protocol, Sequence

from .model import Event


class EventRepository(Protocol):
    """Append-only event storage.

    No validation happens here; the attendance gate owns the alternation rule,
    so back-fills and tests can write any sequence.
    """

    def append(self, event: Event) -> Event:
        """Store ``event``, assigning an id when it has none."""

        raise NotImplementedError

    def all(self) -> Sequence[Event]:
        """Every event, ordered by ``(at, event_id)``."""

        raise NotImplementedError

    def for_identity(self, identity_id: str) -> Sequence[Event]:
        raise NotImplementedError

    def for_day(self, day: date) -> Sequence[Event]:
        raise NotImplementedError

    def for_range(self, start: datetime, end: datetime) -> Sequence[Event]:
        """Events with ``start <= at <= end``."""

        raise NotImplementedError

    def remove(self, event_id: int) -> bool:
        raise NotImplementedError

    def update(self, match: Callable[[Event], bool], *, at: datetime) -> Sequence[Event]:
        """Pending resolution: move matching events to ``at`` and clear their pending flag."""

        raise NotImplementedError
