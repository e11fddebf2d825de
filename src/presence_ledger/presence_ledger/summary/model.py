from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator, Optional, Tuple


def round_half_up(value: float, places: int = 0) -> Decimal:
    quantum = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)


def minutes_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60


@dataclass(frozen=True)
class Session:
    """Derived span between a check-in and its (possibly estimated) check-out.

    ``closed`` means a real checkout event exists, user-made or written back by a
    policy. ``running`` marks a live summary's virtual close at the query time.
    """

    check_in: datetime
    check_out: Optional[datetime] = None
    closed: bool = False
    synthetic_out: bool = False
    running: bool = False

    @property
    def minutes(self) -> float:
        if self.check_out is None:
            return 0.0
        return minutes_between(self.check_in, self.check_out)


@dataclass(frozen=True)
class DailySummary:
    identity_id: str
    display_name: str
    sessions: Tuple[Session, ...] = ()
    total_minutes: int = 0
    total_hours: float = 0.0
    autoclosed: bool = False
    absent: bool = False

    @classmethod
    def from_sessions(
        cls,
        identity_id: str,
        display_name: str,
        sessions: Tuple[Session, ...],
        *,
        autoclosed: bool = False,
    ) -> "DailySummary":
        raw_minutes = sum(s.minutes for s in sessions if s.check_out is not None)
        return cls(
            identity_id=identity_id,
            display_name=display_name,
            sessions=tuple(sessions),
            total_minutes=int(round_half_up(raw_minutes)),
            total_hours=float(round_half_up(raw_minutes / 60, 2)),
            autoclosed=autoclosed,
            absent=raw_minutes == 0,
        )


@dataclass(frozen=True)
class DayReport:
    """All summaries for one day, sorted for display, with day-wide totals."""

    day: date
    summaries: Tuple[DailySummary, ...] = ()
    as_of: Optional[datetime] = None
    total_minutes: int = field(init=False)
    total_hours: float = field(init=False)

    def __post_init__(self):
        minutes = sum(s.total_minutes for s in self.summaries)
        object.__setattr__(self, "total_minutes", minutes)
        object.__setattr__(self, "total_hours", float(round_half_up(minutes / 60, 2)))

    def __iter__(self) -> Iterator[DailySummary]:
        return iter(self.summaries)

    def __len__(self) -> int:
        return len(self.summaries)

    def for_identity(self, identity_id: str) -> Optional[DailySummary]:
        for summary in self.summaries:
            if summary.identity_id == identity_id:
                return summary
        return None
