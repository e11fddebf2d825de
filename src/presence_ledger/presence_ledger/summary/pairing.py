from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..ledger.model import Event
from .model import Session


@dataclass(frozen=True)
class Pairing:
    sessions: Tuple[Session, ...]
    open_checkin: Optional[Event]


def pair_sessions(events: Iterable[Event]) -> Pairing:
    """Walk one identity's events in ledger order, pairing check-ins with check-outs.

    A repeated check-in replaces the open one (the latest wins). A check-out with
    nothing open is ignored. Whatever check-in is still open at the end is
    returned for the auto-close policy to handle.
    """
    sessions: List[Session] = []
    open_checkin: Optional[Event] = None

    for event in sorted(events, key=lambda e: e.sort_key):
        if event.is_checkin:
            open_checkin = event
        elif open_checkin is not None:
            sessions.append(
                Session(
                    check_in=open_checkin.at,
                    check_out=event.at,
                    closed=True,
                    synthetic_out=event.synthetic,
                )
            )
            open_checkin = None

    return Pairing(sessions=tuple(sessions), open_checkin=open_checkin)
