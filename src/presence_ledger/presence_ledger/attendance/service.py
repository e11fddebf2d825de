from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Union

from ..common.datetime_utils import now_local, to_local_naive
from ..core.enums import EventKind, PresenceStatus
from ..core.exceptions import DuplicateEventError, NoOpenSessionError, UnauthorizedError, ValidationError
from ..identities.repository import IdentityRepository
from ..ledger.model import Event
from ..ledger.repository import EventRepository
from ..security.cipher import CipherSession, require_unlocked
from ..status.service import StatusResolver

logger = logging.getLogger(__name__)


def parse_kind(value: Union[str, EventKind]) -> EventKind:
    if isinstance(value, EventKind):
        return value
    text = str(value or "").strip().lower()
    # Older clients send signin/signout.
    aliases = {"signin": EventKind.CHECKIN, "signout": EventKind.CHECKOUT}
    if text in aliases:
        return aliases[text]
    try:
        return EventKind(text)
    except ValueError:
        raise ValidationError(f"Unknown event kind {value!r}")


class AttendanceService:
    """Validation gate: enforces checkin/checkout alternation before anything is appended.

    Per-identity state machine::

        never_checked_in --checkin--> checked_in
        checked_in       --checkout-> checked_out
        checked_out      --checkin--> checked_in

    Every other transition is rejected and the ledger is left untouched.
    """

    def __init__(
        self,
        events: EventRepository,
        identities: IdentityRepository,
        status: StatusResolver,
        *,
        session_provider: Optional[Callable[[], CipherSession]] = None,
    ):
        self._events = events
        self._identities = identities
        self._status = status
        self._session_provider = session_provider or CipherSession

    def record_event(self, identity_id: str, kind: Union[str, EventKind], *, now: datetime | None = None) -> Event:
        kind = parse_kind(kind)
        now = to_local_naive(now) if now else now_local()
        logger.info("Processing %s for %s", kind.value, identity_id)
        require_unlocked(self._session_provider())

        identity = self._identities.get(identity_id)
        if not identity or not identity.active:
            logger.warning("Unauthorized %s attempt for %s", kind.value, identity_id)
            raise UnauthorizedError("Identity not authorized. Please contact an admin to be added to the roster.")

        current = self._status.current_status(identity_id)
        name = identity.display_name

        if kind == EventKind.CHECKIN and current == PresenceStatus.CHECKED_IN:
            logger.warning("Duplicate check-in attempt for %s (%s)", name, identity_id)
            raise DuplicateEventError(f"{name} is already checked in. Please check out first.")

        if kind == EventKind.CHECKOUT:
            if current == PresenceStatus.CHECKED_OUT:
                logger.warning("Duplicate check-out attempt for %s (%s)", name, identity_id)
                raise DuplicateEventError(f"{name} is already checked out. Please check in first.")
            if current == PresenceStatus.NEVER_CHECKED_IN:
                logger.warning("Check-out without check-in for %s (%s)", name, identity_id)
                raise NoOpenSessionError(f"{name} has never checked in. Please check in first.")

        event = self._events.append(
            Event(
                event_id=None,
                identity_id=identity_id,
                display_name=name,
                kind=kind,
                at=now,
            )
        )
        logger.info("%s recorded for %s (%s)", kind.value, name, identity_id)
        return event
