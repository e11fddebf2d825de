from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import PendingStatus


@dataclass(frozen=True)
class PendingSignout:
    """Follow-up for a session that ended the day without a checkout.

    A placeholder checkout carrying ``pending_id`` sits in the ledger at the
    check-in instant until the record is resolved or expires.
    """

    pending_id: str
    identity_id: str
    display_name: str
    email: Optional[str]
    check_in_at: datetime
    check_in_event_id: Optional[int]
    token: str
    created_at: datetime
    deadline: datetime
    status: PendingStatus = PendingStatus.PENDING
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    submitted_check_out: Optional[datetime] = None
    present_only: bool = False

    @property
    def is_pending(self) -> bool:
        return self.status == PendingStatus.PENDING


@dataclass(frozen=True)
class ExpiryOutcome:
    expired: Tuple[PendingSignout, ...]
    affected_dates: Tuple[date, ...]

    @property
    def expired_count(self) -> int:
        return len(self.expired)


@dataclass(frozen=True)
class PendingStats:
    pending: int
    expiring_today: int
    resolved: int
    expired: int
