from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..core.enums import PresenceStatus
from ..identities.model import Identity
from ..identities.repository import IdentityRepository
from ..ledger.model import Event
from ..ledger.repository import EventRepository


@dataclass(frozen=True)
class PresentIdentity:
    identity: Identity
    since: datetime


def status_from_last(last: Optional[Event]) -> PresenceStatus:
    if last is None:
        return PresenceStatus.NEVER_CHECKED_IN
    return PresenceStatus.CHECKED_IN if last.is_checkin else PresenceStatus.CHECKED_OUT


class StatusResolver:
    """Derives presence from the last ledger event of each identity."""

    def __init__(self, events: EventRepository, identities: IdentityRepository):
        self._events = events
        self._identities = identities

    def last_event(self, identity_id: str) -> Optional[Event]:
        events = self._events.for_identity(identity_id)
        return events[-1] if events else None

    def current_status(self, identity_id: str) -> PresenceStatus:
        return status_from_last(self.last_event(identity_id))

    def currently_present(self) -> List[PresentIdentity]:
        last: Dict[str, Event] = {}
        last_checkin: Dict[str, datetime] = {}
        for event in self._events.all():
            last[event.identity_id] = event
            if event.is_checkin:
                last_checkin[event.identity_id] = event.at

        present: List[PresentIdentity] = []
        for identity in self._identities.list():
            event = last.get(identity.identity_id)
            if event is not None and event.is_checkin:
                present.append(PresentIdentity(identity=identity, since=last_checkin[identity.identity_id]))
        return present

    def statuses(self, identities: Sequence[Identity]) -> Dict[str, PresenceStatus]:
        last: Dict[str, Event] = {}
        for event in self._events.all():
            last[event.identity_id] = event
        return {i.identity_id: status_from_last(last.get(i.identity_id)) for i in identities}
