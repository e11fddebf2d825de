from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from ...common.datetime_utils import at_time
from ...core.constants import (
    DEFAULT_AFTER_CUTOFF_MINUTES,
    DEFAULT_CUTOFF_HOUR,
    DEFAULT_EOD_HOUR,
    DEFAULT_EOD_MINUTE,
)
from .base import AutoClosePolicy


class HybridPolicy(AutoClosePolicy):
    """Close at the cutoff for early arrivals, or after a grace window for late ones.

    A check-in before the cutoff closes exactly at the cutoff. A check-in at or
    after it closes ``after_minutes`` later, but never past end of day.
    """

    name = "hybrid"
    writes_back = True

    def __init__(
        self,
        cutoff_hour: int = DEFAULT_CUTOFF_HOUR,
        eod_hour: int = DEFAULT_EOD_HOUR,
        eod_minute: int = DEFAULT_EOD_MINUTE,
        after_minutes: int = DEFAULT_AFTER_CUTOFF_MINUTES,
    ):
        self.cutoff_hour = int(cutoff_hour)
        self.eod_hour = int(eod_hour)
        self.eod_minute = int(eod_minute)
        self.after_minutes = int(after_minutes)

    def estimate(self, *, check_in: datetime, day: date) -> Optional[datetime]:
        cutoff = at_time(day, self.cutoff_hour)
        if check_in < cutoff:
            return cutoff
        eod = at_time(day, self.eod_hour, self.eod_minute)
        return min(check_in + timedelta(minutes=self.after_minutes), eod)

    def describe(self) -> dict:
        return {
            **super().describe(),
            "cutoff_hour": self.cutoff_hour,
            "eod_hour": self.eod_hour,
            "eod_minute": self.eod_minute,
            "after_minutes": self.after_minutes,
        }
