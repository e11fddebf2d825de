from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple

from ..common.datetime_utils import now_local, start_of_day, start_of_week, to_local_naive
from ..core.enums import IdentityRole
from ..identities.repository import IdentityRepository
from ..ledger.model import Event
from ..ledger.repository import EventRepository
from ..status.service import StatusResolver
from ..summary.model import round_half_up
from ..summary.pairing import pair_sessions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityWeek:
    identity_id: str
    display_name: str
    email: Optional[str]
    role: IdentityRole
    expected_hours_per_week: float
    expected_days_per_week: float
    check_ins: int = 0
    check_outs: int = 0
    total_hours: float = 0.0
    days_attended: int = 0

    @property
    def has_activity(self) -> bool:
        return self.check_ins > 0 or self.total_hours > 0


@dataclass(frozen=True)
class WeeklyReport:
    start: datetime
    end: datetime
    total_records: int
    identities: Tuple[IdentityWeek, ...]

    @property
    def identities_with_activity(self) -> int:
        return sum(1 for i in self.identities if i.has_activity)


@dataclass(frozen=True)
class LedgerStats:
    total_identities: int
    active_identities: int
    currently_present: int
    today_check_ins: int
    today_check_outs: int
    today_records: int
    total_records: int
    last_activity: Optional[datetime]


class WeeklyReportService:
    """Week-to-date rollups for the admin dashboard and the weekly email."""

    def __init__(self, events: EventRepository, identities: IdentityRepository, status: StatusResolver):
        self._events = events
        self._identities = identities
        self._status = status

    def weekly_report(self, *, now: Optional[datetime] = None) -> WeeklyReport:
        now = to_local_naive(now) if now else now_local()
        week_start = start_of_day(start_of_week(now.date()))
        week_end = week_start + timedelta(days=7)

        events = [e for e in self._events.for_range(week_start, week_end) if e.at < week_end]
        by_identity: Dict[str, List[Event]] = {}
        for event in events:
            by_identity.setdefault(event.identity_id, []).append(event)

        rows = []
        for identity in self._identities.list():
            own = by_identity.get(identity.identity_id, [])
            per_day: Dict[date, List[Event]] = {}
            for event in own:
                per_day.setdefault(event.at.date(), []).append(event)

            week_minutes = 0.0
            days_attended = 0
            for day_events in per_day.values():
                minutes = sum(s.minutes for s in pair_sessions(day_events).sessions)
                week_minutes += minutes
                if minutes > 0:
                    days_attended += 1

            rows.append(
                IdentityWeek(
                    identity_id=identity.identity_id,
                    display_name=identity.display_name,
                    email=identity.email,
                    role=identity.role,
                    expected_hours_per_week=identity.expected_hours_per_week,
                    expected_days_per_week=identity.expected_days_per_week,
                    check_ins=sum(1 for e in own if e.is_checkin),
                    check_outs=sum(1 for e in own if e.is_checkout),
                    total_hours=float(round_half_up(week_minutes / 60, 2)),
                    days_attended=days_attended,
                )
            )

        report = WeeklyReport(start=week_start, end=week_end, total_records=len(events), identities=tuple(rows))
        logger.info(
            "Weekly report generated - %d records, %d identities with activity",
            report.total_records,
            report.identities_with_activity,
        )
        return report

    def ledger_stats(self, *, now: Optional[datetime] = None) -> LedgerStats:
        now = to_local_naive(now) if now else now_local()
        identities = self._identities.list()
        events = self._events.all()
        today = [e for e in events if e.at.date() == now.date()]
        return LedgerStats(
            total_identities=len(identities),
            active_identities=sum(1 for i in identities if i.active),
            currently_present=len(self._status.currently_present()),
            today_check_ins=sum(1 for e in today if e.is_checkin),
            today_check_outs=sum(1 for e in today if e.is_checkout),
            today_records=len(today),
            total_records=len(events),
            last_activity=events[-1].at if events else None,
        )
