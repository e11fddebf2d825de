from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from ..core.enums import EventKind


@dataclass(frozen=True)
class Event:
    """Domain entity: one check-in or check-out, immutable once stored.

    ``display_name`` is a snapshot taken when the event was written, so history
    keeps the name an identity had at the time.
    """

    event_id: Optional[int]
    identity_id: str
    display_name: str
    kind: EventKind
    at: datetime
    synthetic: bool = False
    pending_id: Optional[str] = None
    pending: bool = False

    @property
    def sort_key(self) -> Tuple[datetime, int]:
        return self.at, self.event_id or 0

    @property
    def is_checkin(self) -> bool:
        return self.kind == EventKind.CHECKIN

    @property
    def is_checkout(self) -> bool:
        return self.kind == EventKind.CHECKOUT
