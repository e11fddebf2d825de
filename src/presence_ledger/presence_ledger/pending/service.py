from __future__ import annotations

import logging
import re
import secrets
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence, Union

from ..common.datetime_utils import as_date, at_time, end_of_day, now_local, parse_timestamp, to_local_naive
from ..core.constants import DEFAULT_PENDING_DEADLINE_HOUR
from ..core.enums import EventKind, PendingStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..identities.repository import IdentityRepository
from ..ledger.model import Event
from ..ledger.repository import EventRepository
from ..security.cipher import CipherSession, require_unlocked
from ..summary.service import SummaryService
from .model import ExpiryOutcome, PendingSignout, PendingStats
from .repository import PendingRepository

logger = logging.getLogger(__name__)

_CLOCK_TIME = re.compile(r"^\d{2}:\d{2}$")


class PendingSignoutService:
    """Use case: follow up on sessions left open at the end of a day.

    Opening a pending record drops a placeholder checkout at the check-in
    instant (zero minutes) so the day reads as "present only" until an admin
    supplies the real time or the deadline passes.
    """

    def __init__(
        self,
        pending: PendingRepository,
        events: EventRepository,
        identities: IdentityRepository,
        summaries: SummaryService,
        *,
        deadline_hour: int = DEFAULT_PENDING_DEADLINE_HOUR,
        session_provider: Optional[Callable[[], CipherSession]] = None,
    ):
        self._pending = pending
        self._events = events
        self._identities = identities
        self._summaries = summaries
        self._deadline_hour = int(deadline_hour)
        self._session_provider = session_provider or CipherSession

    def open_for_day(self, day, *, now: Optional[datetime] = None) -> List[PendingSignout]:
        day = as_date(day)
        require_unlocked(self._session_provider())
        now = to_local_naive(now) if now else now_local()

        already = {r.check_in_event_id for r in self._pending.list() if r.is_pending}
        created: List[PendingSignout] = []
        for check_in in self._summaries.open_sessions_for_date(day):
            if check_in.event_id in already:
                continue

            identity = self._identities.get(check_in.identity_id)
            record = PendingSignout(
                pending_id=f"{int(now.timestamp() * 1000)}-{check_in.identity_id}-{secrets.token_hex(4)}",
                identity_id=check_in.identity_id,
                display_name=check_in.display_name or (identity.display_name if identity else ""),
                email=identity.email if identity else None,
                check_in_at=check_in.at,
                check_in_event_id=check_in.event_id,
                token=secrets.token_hex(32),
                created_at=now,
                deadline=at_time(now.date() + timedelta(days=1), self._deadline_hour),
            )
            self._events.append(
                Event(
                    event_id=None,
                    identity_id=record.identity_id,
                    display_name=record.display_name,
                    kind=EventKind.CHECKOUT,
                    at=record.check_in_at,
                    synthetic=True,
                    pending_id=record.pending_id,
                    pending=True,
                )
            )
            self._pending.save(record)
            created.append(record)
            logger.info("Created pending sign-out for %s (%s)", record.display_name, record.identity_id)
        return created

    def _check_out_time(self, record: PendingSignout, check_out: Union[None, str, datetime]) -> datetime:
        if isinstance(check_out, datetime):
            out = to_local_naive(check_out)
        elif isinstance(check_out, str) and _CLOCK_TIME.match(check_out.strip()):
            try:
                clock = datetime.strptime(check_out.strip(), "%H:%M").time()
            except ValueError:
                raise ValidationError("Invalid time (HH:MM)")
            out = datetime.combine(record.check_in_at.date(), clock)
        else:
            out = parse_timestamp(check_out)
            if out is None:
                raise ValidationError("A checkout time is required unless marking present only")

        if out < record.check_in_at:
            raise ValidationError("Checkout cannot be before check-in")
        return out

    def _close_placeholder(self, record: PendingSignout, out: datetime, *, synthetic: bool) -> None:
        updated = self._events.update(lambda e: e.pending_id == record.pending_id, at=out)
        if updated:
            return
        logger.warning("No placeholder event for pending %s, appending a checkout", record.pending_id)
        self._events.append(
            Event(
                event_id=None,
                identity_id=record.identity_id,
                display_name=record.display_name,
                kind=EventKind.CHECKOUT,
                at=out,
                synthetic=synthetic,
                pending_id=record.pending_id,
            )
        )

    def resolve(
        self,
        pending_id: str,
        *,
        check_out: Union[None, str, datetime] = None,
        present_only: bool = False,
        resolved_by: str = "admin",
        now: Optional[datetime] = None,
    ) -> PendingSignout:
        require_unlocked(self._session_provider())
        record = self._pending.get(pending_id)
        if not record:
            raise NotFoundError("Pending record not found")
        if not record.is_pending:
            raise ValidationError("This record has already been resolved")

        out = record.check_in_at if present_only else self._check_out_time(record, check_out)
        self._close_placeholder(record, out, synthetic=present_only)

        resolved = replace(
            record,
            status=PendingStatus.RESOLVED,
            resolved_at=to_local_naive(now) if now else now_local(),
            resolved_by=resolved_by,
            submitted_check_out=out,
            present_only=present_only,
        )
        self._pending.save(resolved)
        logger.info("%s resolved pending sign-out for %s", resolved_by, record.display_name)
        return resolved

    def expire_overdue(self, *, now: Optional[datetime] = None) -> ExpiryOutcome:
        """Past-deadline records count as present only, with zero hours."""
        require_unlocked(self._session_provider())
        now = to_local_naive(now) if now else now_local()
        expired: List[PendingSignout] = []
        dates = set()
        for record in self._pending.list():
            if not record.is_pending or record.deadline >= now:
                continue
            self._close_placeholder(record, record.check_in_at, synthetic=True)
            done = replace(
                record,
                status=PendingStatus.EXPIRED,
                resolved_at=now,
                resolved_by="system",
                submitted_check_out=record.check_in_at,
                present_only=True,
            )
            self._pending.save(done)
            expired.append(done)
            dates.add(record.check_in_at.date())
            logger.warning("Expired pending sign-out for %s - marked as present only", record.display_name)
        return ExpiryOutcome(expired=tuple(expired), affected_dates=tuple(sorted(dates)))

    def find_by_token(self, token: str) -> Optional[PendingSignout]:
        return self._pending.find_by_token(token)

    def list(self, status: Optional[PendingStatus] = None) -> Sequence[PendingSignout]:
        records = self._pending.list()
        if status is not None:
            records = [r for r in records if r.status == status]
        return sorted(records, key=lambda r: r.created_at)

    def stats(self, *, now: Optional[datetime] = None) -> PendingStats:
        now = to_local_naive(now) if now else now_local()
        today_end = end_of_day(now.date())
        records = self._pending.list()
        return PendingStats(
            pending=sum(1 for r in records if r.is_pending),
            expiring_today=sum(1 for r in records if r.is_pending and r.deadline <= today_end),
            resolved=sum(1 for r in records if r.status == PendingStatus.RESOLVED),
            expired=sum(1 for r in records if r.status == PendingStatus.EXPIRED),
        )
