from __future__ import annotations

from datetime import datetime

from src.presence_ledger.presence_ledger.core.enums import PresenceStatus


def test_status_follows_last_event(container, roster):
    attendance = container.attendance_service
    status = container.status_resolver

    assert status.current_status("10000001") == PresenceStatus.NEVER_CHECKED_IN

    attendance.record_event("10000001", "checkin", now=datetime(2026, 3, 10, 9, 0))
    assert status.current_status("10000001") == PresenceStatus.CHECKED_IN

    attendance.record_event("10000001", "checkout", now=datetime(2026, 3, 10, 12, 0))
    assert status.current_status("10000001") == PresenceStatus.CHECKED_OUT


def test_currently_present_lists_open_identities(container, roster):
    attendance = container.attendance_service
    attendance.record_event("10000001", "checkin", now=datetime(2026, 3, 10, 9, 0))
    attendance.record_event("10000002", "checkin", now=datetime(2026, 3, 10, 9, 30))
    attendance.record_event("10000002", "checkout", now=datetime(2026, 3, 10, 10, 0))

    present = container.status_resolver.currently_present()

    assert [p.identity.identity_id for p in present] == ["10000001"]
    assert present[0].since == datetime(2026, 3, 10, 9, 0)


def test_statuses_for_roster(container, roster):
    container.attendance_service.record_event("10000002", "checkin", now=datetime(2026, 3, 10, 9, 0))

    statuses = container.status_resolver.statuses(roster.list())

    assert statuses == {
        "10000001": PresenceStatus.NEVER_CHECKED_IN,
        "10000002": PresenceStatus.CHECKED_IN,
    }
