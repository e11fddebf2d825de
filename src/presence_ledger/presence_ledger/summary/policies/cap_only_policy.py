from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...common.datetime_utils import at_time
from ...core.constants import DEFAULT_CUTOFF_HOUR
from .base import AutoClosePolicy


class CapOnlyPolicy(AutoClosePolicy):
    """Read-time estimate at the cutoff hour; nothing is written."""

    name = "cap_only"

    def __init__(self, hour: int = DEFAULT_CUTOFF_HOUR):
        self.hour = int(hour)

    def estimate(self, *, check_in: datetime, day: date) -> Optional[datetime]:
        return at_time(day, self.hour)

    def describe(self) -> dict:
        return {**super().describe(), "hour": self.hour}
