"""Boundary object handed to collaborators (HTTP layer, scripts, schedulers).

Every call that touches storage returns a :class:`Result` instead of raising,
so a rejected write or an unreadable data file never escapes as an exception.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, TypeVar, Union

from .attendance.service import AttendanceService
from .core.enums import EventKind, PresenceStatus
from .core.exceptions import DomainError, StorageError
from .core.result import Result
from .identities.model import Identity
from .identities.service import IdentityService
from .ledger.model import Event
from .ledger.service import LedgerService
from .pending.model import ExpiryOutcome, PendingSignout
from .pending.service import PendingSignoutService
from .reports.service import LedgerStats, WeeklyReport, WeeklyReportService
from .security.cipher import CipherSession
from .security.service import EncryptionService
from .status.service import PresentIdentity, StatusResolver
from .storage.json_store import JsonCollectionStore
from .summary.model import DayReport
from .summary.policies.base import AutoClosePolicy
from .summary.service import SummaryService

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PresenceLedger:
    def __init__(
        self,
        *,
        identities: IdentityService,
        ledger: LedgerService,
        attendance: AttendanceService,
        status: StatusResolver,
        summaries: SummaryService,
        encryption: EncryptionService,
        pending: PendingSignoutService,
        reports: WeeklyReportService,
        encrypted_stores: Iterable[JsonCollectionStore] = (),
    ):
        self._identities = identities
        self._ledger = ledger
        self._attendance = attendance
        self._status = status
        self._summaries = summaries
        self._encryption = encryption
        self._pending = pending
        self._reports = reports
        self._encrypted_stores = tuple(encrypted_stores)

    @staticmethod
    def _attempt(action: Callable[[], T], what: str) -> Result[T]:
        try:
            return Result.success(action())
        except StorageError as e:
            logger.error("%s failed: %s", what, e)
            return Result.from_error(e)
        except DomainError as e:
            logger.warning("%s rejected (%s): %s", what, e.reason.value, e)
            return Result.from_error(e)

    # events

    def record_event(self, identity_id: str, kind: Union[str, EventKind], *, now: Optional[datetime] = None) -> Result[Event]:
        return self._attempt(lambda: self._attendance.record_event(identity_id, kind, now=now), "record_event")

    def current_status(self, identity_id: str) -> Result[PresenceStatus]:
        return self._attempt(lambda: self._status.current_status(identity_id), "current_status")

    def currently_present(self) -> Result[List[PresentIdentity]]:
        return self._attempt(self._status.currently_present, "currently_present")

    def all_events(self) -> Result[Sequence[Event]]:
        return self._attempt(self._ledger.all_events, "all_events")

    def events_for_range(self, start: datetime, end: datetime) -> Result[Sequence[Event]]:
        return self._attempt(lambda: self._ledger.events_for_range(start, end), "events_for_range")

    def delete_event(self, event_id: int) -> Result[None]:
        return self._attempt(lambda: self._ledger.delete_event(event_id), "delete_event")

    # summaries

    def preview_daily_summary(self, day: Union[date, str], policy: Optional[AutoClosePolicy] = None) -> Result[DayReport]:
        return self._attempt(lambda: self._summaries.preview_daily_summary(day, policy), "preview_daily_summary")

    def daily_summary_with_auto_close(self, day: Union[date, str], policy: AutoClosePolicy) -> Result[DayReport]:
        return self._attempt(lambda: self._summaries.daily_summary_with_auto_close(day, policy), "daily_summary")

    def daily_summary(self, day: Union[date, str], policy: Optional[AutoClosePolicy] = None) -> Result[DayReport]:
        return self._attempt(lambda: self._summaries.daily_summary(day, policy), "daily_summary")

    def live_summary(self, day: Union[date, str], *, now: Optional[datetime] = None) -> Result[DayReport]:
        return self._attempt(lambda: self._summaries.live_summary(day, now=now), "live_summary")

    def hours_so_far(self, identity_id: str, *, now: Optional[datetime] = None) -> Result[float]:
        return self._attempt(lambda: self._summaries.hours_so_far(identity_id, now=now), "hours_so_far")

    # roster

    def add_identity(
        self,
        identity_id: str,
        display_name: str,
        email: str = "",
        meta: Optional[Mapping[str, Any]] = None,
    ) -> Result[Identity]:
        return self._attempt(lambda: self._identities.add_or_update(identity_id, display_name, email, meta), "add_identity")

    def update_identity(self, identity_id: str, **changes: Any) -> Result[Identity]:
        return self._attempt(lambda: self._identities.update(identity_id, **changes), "update_identity")

    def remove_identity(self, identity_id: str) -> Result[None]:
        return self._attempt(lambda: self._identities.remove(identity_id), "remove_identity")

    def list_identities(self) -> Result[Sequence[Identity]]:
        return self._attempt(self._identities.list, "list_identities")

    # encryption

    def set_encryption(self, enabled: bool, passphrase: Optional[str] = None) -> Result[CipherSession]:
        """Switch encryption and re-encode the stored collections to match."""

        def switch() -> CipherSession:
            previous = self._encryption.session
            current = self._encryption.set_encryption(enabled, passphrase)
            if previous != current:
                for store in self._encrypted_stores:
                    store.migrate(previous, current)
            return current

        return self._attempt(switch, "set_encryption")

    def verify_passphrase(self, passphrase: str) -> Result[bool]:
        return self._attempt(lambda: self._encryption.verify_passphrase(passphrase), "verify_passphrase")

    def unlock(self, passphrase: str) -> Result[bool]:
        return self._attempt(lambda: self._encryption.unlock(passphrase), "unlock")

    def lock(self) -> None:
        """Forget the cached passphrase; encrypted fields read back as stored."""
        self._encryption.lock()

    # pending sign-outs

    def open_pending_for_day(self, day: Union[date, str], *, now: Optional[datetime] = None) -> Result[List[PendingSignout]]:
        return self._attempt(lambda: self._pending.open_for_day(day, now=now), "open_pending_for_day")

    def resolve_pending(
        self,
        pending_id: str,
        *,
        check_out: Union[None, str, datetime] = None,
        present_only: bool = False,
    ) -> Result[PendingSignout]:
        return self._attempt(
            lambda: self._pending.resolve(pending_id, check_out=check_out, present_only=present_only),
            "resolve_pending",
        )

    def expire_pending(self, *, now: Optional[datetime] = None) -> Result[ExpiryOutcome]:
        return self._attempt(lambda: self._pending.expire_overdue(now=now), "expire_pending")

    # reports

    def weekly_report(self, *, now: Optional[datetime] = None) -> Result[WeeklyReport]:
        return self._attempt(lambda: self._reports.weekly_report(now=now), "weekly_report")

    def ledger_stats(self, *, now: Optional[datetime] = None) -> Result[LedgerStats]:
        return self._attempt(lambda: self._reports.ledger_stats(now=now), "ledger_stats")
