from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Optional


class AutoClosePolicy(ABC):
    """Strategy Pattern: decide where a session with no checkout ends.

    ``writes_back`` policies persist their close as a synthetic checkout event;
    the others only estimate at read time.
    """

    name = "base"
    writes_back = False

    @abstractmethod
    def estimate(self, *, check_in: datetime, day: date) -> Optional[datetime]:
        raise NotImplementedError

    def close_at(self, *, check_in: datetime, day: date) -> Optional[datetime]:
        """The policy's estimate, never earlier than the check-in itself."""
        out = self.estimate(check_in=check_in, day=day)
        if out is None:
            return None
        return max(out, check_in)

    def describe(self) -> dict:
        return {"name": self.name, "writes_back": self.writes_back}
