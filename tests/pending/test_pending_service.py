from __future__ import annotations

from datetime import date, datetime

import pytest

from src.presence_ledger.presence_ledger.core.enums import EventKind, PendingStatus
from src.presence_ledger.presence_ledger.core.exceptions import NotFoundError, ValidationError
from src.presence_ledger.presence_ledger.ledger.model import Event

DAY = date(2026, 3, 10)
NEXT_MORNING = datetime(2026, 3, 11, 8, 0)


@pytest.fixture
def opened(container, roster):
    container.attendance_service.record_event("10000001", "checkin", now=datetime(2026, 3, 10, 9, 0))
    records = container.pending_service.open_for_day(DAY, now=NEXT_MORNING)
    return records[0]


def test_open_creates_record_and_placeholder(container, opened):
    assert opened.identity_id == "10000001"
    assert opened.display_name == "Ada Lovelace"
    assert opened.email == "ada@example.org"
    assert opened.status == PendingStatus.PENDING
    assert opened.deadline == datetime(2026, 3, 12, 17, 0)
    assert len(opened.token) == 64

    placeholder = container.events_repo.for_identity("10000001")[-1]
    assert placeholder.pending_id == opened.pending_id
    assert placeholder.pending is True
    assert placeholder.synthetic is True
    assert placeholder.at == opened.check_in_at

    ada = container.summary_service.preview_daily_summary(DAY).for_identity("10000001")
    assert ada.total_minutes == 0
    assert ada.absent is True


def test_open_twice_does_not_duplicate(container, opened):
    assert container.pending_service.open_for_day(DAY, now=NEXT_MORNING) == []
    assert len(container.pending_service.list()) == 1


def test_resolve_with_clock_time(container, opened):
    resolved = container.pending_service.resolve(opened.pending_id, check_out="15:30", now=NEXT_MORNING)

    assert resolved.status == PendingStatus.RESOLVED
    assert resolved.submitted_check_out == datetime(2026, 3, 10, 15, 30)
    assert resolved.resolved_by == "admin"

    events = container.events_repo.for_identity("10000001")
    assert len(events) == 2
    assert events[-1].at == datetime(2026, 3, 10, 15, 30)
    assert events[-1].pending is False

    ada = container.summary_service.preview_daily_summary(DAY).for_identity("10000001")
    assert ada.total_hours == 6.5


def test_resolve_rejects_bad_input(container, opened):
    svc = container.pending_service

    with pytest.raises(ValidationError):
        svc.resolve(opened.pending_id, check_out="08:00")
    with pytest.raises(ValidationError):
        svc.resolve(opened.pending_id)
    with pytest.raises(NotFoundError):
        svc.resolve("nope", check_out="15:00")

    svc.resolve(opened.pending_id, present_only=True)
    with pytest.raises(ValidationError):
        svc.resolve(opened.pending_id, check_out="15:00")


def test_resolve_appends_checkout_when_placeholder_missing(container, opened):
    placeholder = container.events_repo.for_identity("10000001")[-1]
    container.events_repo.remove(placeholder.event_id)

    container.pending_service.resolve(opened.pending_id, check_out=datetime(2026, 3, 10, 12, 0))

    events = container.events_repo.for_identity("10000001")
    assert len(events) == 2
    assert events[-1].at == datetime(2026, 3, 10, 12, 0)
    assert events[-1].synthetic is False


def test_expire_overdue_marks_present_only(container, opened):
    svc = container.pending_service

    assert svc.expire_overdue(now=datetime(2026, 3, 12, 16, 59)).expired_count == 0

    outcome = svc.expire_overdue(now=datetime(2026, 3, 12, 17, 1))

    assert outcome.expired_count == 1
    assert outcome.affected_dates == (DAY,)
    record = svc.list(PendingStatus.EXPIRED)[0]
    assert record.present_only is True
    assert record.resolved_by == "system"
    assert svc.list(PendingStatus.PENDING) == []


def test_find_by_token_and_stats(container, opened):
    svc = container.pending_service

    assert svc.find_by_token(opened.token).pending_id == opened.pending_id
    assert svc.find_by_token("") is None

    stats = svc.stats(now=datetime(2026, 3, 12, 9, 0))
    assert (stats.pending, stats.expiring_today, stats.resolved, stats.expired) == (1, 1, 0, 0)

    svc.resolve(opened.pending_id, check_out="12:00")
    stats = svc.stats(now=datetime(2026, 3, 12, 9, 0))
    assert (stats.pending, stats.resolved) == (0, 1)


def test_pending_ids_differ_for_same_identity_opened_in_one_run(container, roster):
    for at in (datetime(2026, 3, 9, 9, 0), datetime(2026, 3, 10, 9, 0)):
        container.ledger_service.append_raw(
            Event(event_id=None, identity_id="10000001", display_name="Ada Lovelace", kind=EventKind.CHECKIN, at=at)
        )

    first = container.pending_service.open_for_day(date(2026, 3, 9), now=NEXT_MORNING)
    second = container.pending_service.open_for_day(DAY, now=NEXT_MORNING)

    assert len(first) == len(second) == 1
    assert first[0].pending_id != second[0].pending_id

    container.pending_service.resolve(first[0].pending_id, check_out="12:00", now=NEXT_MORNING)

    placeholders = [e for e in container.events_repo.for_identity("10000001") if e.pending_id]
    by_id = {e.pending_id: e for e in placeholders}
    assert by_id[first[0].pending_id].at == datetime(2026, 3, 9, 12, 0)
    assert by_id[first[0].pending_id].pending is False
    assert by_id[second[0].pending_id].at == datetime(2026, 3, 10, 9, 0)
    assert by_id[second[0].pending_id].pending is True
