from __future__ import annotations

from datetime import date, datetime

from src.presence_ledger.presence_ledger.summary.policies.cap_only_policy import CapOnlyPolicy
from src.presence_ledger.presence_ledger.summary.policies.hybrid_policy import HybridPolicy
from src.presence_ledger.presence_ledger.summary.policies.leave_open_policy import LeaveOpenPolicy

DAY = date(2026, 3, 10)


def at(hour, minute=0, day=DAY):
    return datetime(day.year, day.month, day.day, hour, minute)


def test_closed_session_totals(container, roster):
    gate = container.attendance_service
    gate.record_event("10000001", "checkin", now=at(9))
    gate.record_event("10000001", "checkout", now=at(12, 30))

    report = container.summary_service.preview_daily_summary(DAY)
    ada = report.for_identity("10000001")

    assert len(ada.sessions) == 1
    assert ada.sessions[0].closed is True
    assert ada.total_minutes == 210
    assert ada.total_hours == 3.5
    assert ada.absent is False
    assert report.total_minutes == 210


def test_active_roster_without_events_is_absent(container, roster):
    roster.add_or_update("10000003", "Grace Hopper")
    roster.update("10000003", active=False)
    container.attendance_service.record_event("10000001", "checkin", now=at(9))
    container.attendance_service.record_event("10000001", "checkout", now=at(10))

    report = container.summary_service.preview_daily_summary(DAY)

    alan = report.for_identity("10000002")
    assert alan.absent is True
    assert alan.sessions == ()
    assert alan.total_hours == 0.0
    assert report.for_identity("10000003") is None
    assert [s.display_name for s in report] == ["Ada Lovelace", "Alan Turing"]


def test_zero_minute_day_counts_as_absent(container, roster):
    gate = container.attendance_service
    gate.record_event("10000001", "checkin", now=at(9))
    gate.record_event("10000001", "checkout", now=at(9))

    ada = container.summary_service.preview_daily_summary(DAY).for_identity("10000001")

    assert len(ada.sessions) == 1
    assert ada.absent is True


def test_totals_round_half_up(container, roster):
    gate = container.attendance_service
    gate.record_event("10000001", "checkin", now=at(9))
    gate.record_event("10000001", "checkout", now=at(9, 20))

    ada = container.summary_service.preview_daily_summary(DAY).for_identity("10000001")

    assert ada.total_minutes == 20
    assert ada.total_hours == 0.33


def test_preview_never_writes(container, roster):
    container.attendance_service.record_event("10000001", "checkin", now=at(9))
    before = container.events_repo.all()

    report = container.summary_service.preview_daily_summary(DAY, HybridPolicy(cutoff_hour=17))

    session = report.for_identity("10000001").sessions[0]
    assert session.check_out == at(17)
    assert session.closed is False
    assert report.for_identity("10000001").total_hours == 8.0
    assert container.events_repo.all() == before


def test_leave_open_policy_reports_no_hours(container, roster):
    container.attendance_service.record_event("10000001", "checkin", now=at(9))

    ada = container.summary_service.preview_daily_summary(DAY, LeaveOpenPolicy()).for_identity("10000001")

    assert ada.sessions[0].check_out is None
    assert ada.total_minutes == 0


def test_auto_close_writes_synthetic_checkout_once(container, roster):
    container.attendance_service.record_event("10000001", "checkin", now=at(9))
    policy = HybridPolicy(cutoff_hour=17, after_minutes=60)

    first = container.summary_service.daily_summary_with_auto_close(DAY, policy)

    ada = first.for_identity("10000001")
    assert ada.autoclosed is True
    assert ada.sessions[0].check_out == at(17)
    assert ada.sessions[0].closed is True
    assert ada.sessions[0].synthetic_out is True

    events = container.events_repo.for_identity("10000001")
    assert len(events) == 2
    assert events[-1].synthetic is True
    assert events[-1].at == at(17)

    second = container.summary_service.daily_summary_with_auto_close(DAY, policy)
    assert len(container.events_repo.for_identity("10000001")) == 2
    again = second.for_identity("10000001")
    assert again.autoclosed is False
    assert again.sessions[0].synthetic_out is True
    assert again.total_hours == 8.0


def test_late_arrival_auto_closed_after_grace(container, roster):
    container.attendance_service.record_event("10000001", "checkin", now=at(17, 15))

    report = container.summary_service.daily_summary_with_auto_close(DAY, HybridPolicy(cutoff_hour=17, after_minutes=60))

    assert report.for_identity("10000001").sessions[0].check_out == at(18, 15)
    assert container.status_resolver.current_status("10000001").value == "checked_out"


def test_daily_summary_dispatches_on_policy(container, roster):
    container.attendance_service.record_event("10000001", "checkin", now=at(9))

    container.summary_service.daily_summary(DAY, CapOnlyPolicy(hour=17))
    assert len(container.events_repo.all()) == 1

    container.summary_service.daily_summary(DAY, HybridPolicy())
    assert len(container.events_repo.all()) == 2


def test_live_summary_runs_open_sessions_until_now(container, roster):
    container.attendance_service.record_event("10000001", "checkin", now=at(9))

    report = container.summary_service.live_summary(DAY, now=at(11, 30))

    session = report.for_identity("10000001").sessions[0]
    assert session.running is True
    assert session.closed is False
    assert session.check_out == at(11, 30)
    assert report.for_identity("10000001").total_hours == 2.5
    assert report.as_of == at(11, 30)
    assert len(container.events_repo.all()) == 1


def test_live_summary_clamps_now_into_the_day(container, roster):
    container.attendance_service.record_event("10000001", "checkin", now=at(9))

    past_day = container.summary_service.live_summary(DAY, now=datetime(2026, 3, 12, 8, 0))
    assert past_day.as_of.date() == DAY
    assert past_day.as_of.hour == 23

    before_checkin = container.summary_service.live_summary(DAY, now=at(8))
    assert before_checkin.for_identity("10000001").sessions[0].check_out == at(9)


def test_hours_so_far(container, roster):
    container.attendance_service.record_event("10000001", "checkin", now=at(9))

    assert container.summary_service.hours_so_far("10000001", now=at(10, 15)) == 1.25
    assert container.summary_service.hours_so_far("10000002", now=at(10, 15)) == 0.0


def test_display_name_falls_back_for_removed_identity(container, roster):
    container.attendance_service.record_event("10000002", "checkin", now=at(9))
    container.attendance_service.record_event("10000002", "checkout", now=at(10))
    roster.remove("10000002")

    alan = container.summary_service.preview_daily_summary(DAY).for_identity("10000002")

    assert alan.display_name == "Alan Turing"
    assert alan.total_hours == 1.0


def test_open_sessions_for_date(container, roster):
    gate = container.attendance_service
    gate.record_event("10000001", "checkin", now=at(9))
    gate.record_event("10000002", "checkin", now=at(9, 30))
    gate.record_event("10000002", "checkout", now=at(11))

    open_checkins = container.summary_service.open_sessions_for_date(DAY)

    assert [e.identity_id for e in open_checkins] == ["10000001"]
