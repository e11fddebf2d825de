from __future__ import annotations

import locale
import logging
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..common.datetime_utils import as_date, clamp, end_of_day, format_timestamp, now_local, start_of_day, to_local_naive
from ..core.constants import UNKNOWN_DISPLAY_NAME
from ..core.enums import EventKind
from ..identities.repository import IdentityRepository
from ..ledger.model import Event
from ..ledger.repository import EventRepository
from ..security.cipher import CipherSession, require_unlocked
from .factory import AutoClosePolicyFactory
from .model import DailySummary, DayReport, Session
from .pairing import pair_sessions
from .policies.base import AutoClosePolicy

logger = logging.getLogger(__name__)

# (identity_id, display_name, open check-in) -> (session, autoclosed)
CloseOpen = Callable[[str, str, Event], Tuple[Session, bool]]


def _display_order(summary: DailySummary):
    return locale.strxfrm(summary.display_name), summary.identity_id


class SummaryService:
    """Turns a day's ledger events into per-identity sessions and totals.

    Three ways to read a day, differing only in how a session with no checkout
    is ended:

    * :meth:`preview_daily_summary` asks the policy for an estimate and never writes.
    * :meth:`daily_summary_with_auto_close` persists the close for write-back
      policies, so a second call sees a real (synthetic) checkout.
    * :meth:`live_summary` ends open sessions at the query time.
    """

    def __init__(
        self,
        events: EventRepository,
        identities: IdentityRepository,
        *,
        policy_factory: Optional[AutoClosePolicyFactory] = None,
        session_provider: Optional[Callable[[], CipherSession]] = None,
    ):
        self._events = events
        self._identities = identities
        self._factory = policy_factory or AutoClosePolicyFactory()
        self._session_provider = session_provider or CipherSession

    def default_policy(self) -> AutoClosePolicy:
        return self._factory.from_options()

    def _report(self, day: date, close_open: CloseOpen, *, as_of: Optional[datetime] = None) -> DayReport:
        roster = self._identities.list()
        roster_names = {i.identity_id: i.display_name for i in roster}

        by_identity: Dict[str, List[Event]] = {}
        for event in self._events.for_day(day):
            by_identity.setdefault(event.identity_id, []).append(event)

        summaries: List[DailySummary] = []
        for identity_id, events in by_identity.items():
            name = events[-1].display_name or roster_names.get(identity_id) or UNKNOWN_DISPLAY_NAME
            pairing = pair_sessions(events)
            sessions = list(pairing.sessions)
            autoclosed = False
            if pairing.open_checkin is not None:
                session, autoclosed = close_open(identity_id, name, pairing.open_checkin)
                sessions.append(session)
            summaries.append(DailySummary.from_sessions(identity_id, name, tuple(sessions), autoclosed=autoclosed))

        for identity in roster:
            if identity.active and identity.identity_id not in by_identity:
                summaries.append(
                    DailySummary(
                        identity_id=identity.identity_id,
                        display_name=identity.display_name or UNKNOWN_DISPLAY_NAME,
                        absent=True,
                    )
                )

        summaries.sort(key=_display_order)
        return DayReport(day=day, summaries=tuple(summaries), as_of=as_of)

    def preview_daily_summary(self, day, policy: Optional[AutoClosePolicy] = None) -> DayReport:
        """Read-only summary; open sessions get the policy's estimate with ``closed=False``."""
        day = as_date(day)
        policy = policy or self.default_policy()

        def estimate(identity_id: str, name: str, open_checkin: Event) -> Tuple[Session, bool]:
            out = policy.close_at(check_in=open_checkin.at, day=day)
            return Session(check_in=open_checkin.at, check_out=out, closed=False), False

        return self._report(day, estimate)

    def daily_summary_with_auto_close(self, day, policy: AutoClosePolicy) -> DayReport:
        """Summary that writes a synthetic checkout for every open session.

        Only write-back policies write; any other policy behaves like
        :meth:`preview_daily_summary`.
        """
        day = as_date(day)
        if not policy.writes_back:
            return self.preview_daily_summary(day, policy)
        require_unlocked(self._session_provider())
        logger.info("Closing open sessions for %s with %s", day.isoformat(), policy.describe())

        def write_close(identity_id: str, name: str, open_checkin: Event) -> Tuple[Session, bool]:
            out = policy.close_at(check_in=open_checkin.at, day=day)
            self._events.append(
                Event(
                    event_id=None,
                    identity_id=identity_id,
                    display_name=name,
                    kind=EventKind.CHECKOUT,
                    at=out,
                    synthetic=True,
                )
            )
            logger.info(
                "Auto-closed session for %s (%s) at %s using %s policy",
                name,
                identity_id,
                format_timestamp(out),
                policy.name,
            )
            return Session(check_in=open_checkin.at, check_out=out, closed=True, synthetic_out=True), True

        return self._report(day, write_close)

    def daily_summary(self, day, policy: Optional[AutoClosePolicy] = None) -> DayReport:
        policy = policy or self.default_policy()
        if policy.writes_back:
            return self.daily_summary_with_auto_close(day, policy)
        return self.preview_daily_summary(day, policy)

    def live_summary(self, day, *, now: Optional[datetime] = None) -> DayReport:
        """Hours so far: open sessions run until ``now`` clamped into the day."""
        day = as_date(day)
        now = to_local_naive(now) if now else now_local()
        as_of = clamp(now, start_of_day(day), end_of_day(day))

        def run_until_now(identity_id: str, name: str, open_checkin: Event) -> Tuple[Session, bool]:
            out = max(as_of, open_checkin.at)
            return Session(check_in=open_checkin.at, check_out=out, closed=False, running=True), False

        return self._report(day, run_until_now, as_of=as_of)

    def hours_so_far(self, identity_id: str, *, now: Optional[datetime] = None) -> float:
        now = to_local_naive(now) if now else now_local()
        summary = self.live_summary(now.date(), now=now).for_identity(identity_id)
        return summary.total_hours if summary else 0.0

    def open_sessions_for_date(self, day) -> Sequence[Event]:
        """The dangling check-in of every identity still open at the end of ``day``."""
        day = as_date(day)
        by_identity: Dict[str, List[Event]] = {}
        for event in self._events.for_day(day):
            by_identity.setdefault(event.identity_id, []).append(event)

        open_checkins = []
        for events in by_identity.values():
            pairing = pair_sessions(events)
            if pairing.open_checkin is not None:
                open_checkins.append(pairing.open_checkin)
        return sorted(open_checkins, key=lambda e: e.sort_key)
