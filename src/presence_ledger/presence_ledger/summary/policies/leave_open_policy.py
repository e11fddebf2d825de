from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from .base import AutoClosePolicy


class LeaveOpenPolicy(AutoClosePolicy):
    """No estimate: the session stays open with no checkout."""

    name = "leave_open"

    def estimate(self, *, check_in: datetime, day: date) -> Optional[datetime]:
        return None
