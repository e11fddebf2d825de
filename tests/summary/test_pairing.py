from __future__ import annotations

from datetime import datetime

from src.presence_ledger.presence_ledger.core.enums import EventKind
from src.presence_ledger.presence_ledger.ledger.model import Event
from src.presence_ledger.presence_ledger.summary.pairing import pair_sessions


def _ev(event_id, kind, hour, minute=0, synthetic=False):
    return Event(
        event_id=event_id,
        identity_id="10000001",
        display_name="Ada",
        kind=kind,
        at=datetime(2026, 3, 10, hour, minute),
        synthetic=synthetic,
    )


IN, OUT = EventKind.CHECKIN, EventKind.CHECKOUT


def test_pairs_in_order_and_reports_open_checkin():
    pairing = pair_sessions([_ev(3, IN, 14), _ev(1, IN, 9), _ev(2, OUT, 12, 30)])

    assert len(pairing.sessions) == 1
    session = pairing.sessions[0]
    assert (session.check_in.hour, session.check_out.hour, session.check_out.minute) == (9, 12, 30)
    assert session.closed is True
    assert session.minutes == 210
    assert pairing.open_checkin.event_id == 3


def test_repeated_checkin_latest_wins():
    pairing = pair_sessions([_ev(1, IN, 9), _ev(2, IN, 10), _ev(3, OUT, 11)])

    assert [s.check_in.hour for s in pairing.sessions] == [10]
    assert pairing.open_checkin is None


def test_dangling_checkout_is_ignored():
    pairing = pair_sessions([_ev(1, OUT, 8), _ev(2, IN, 9), _ev(3, OUT, 10)])

    assert len(pairing.sessions) == 1
    assert pairing.sessions[0].check_in.hour == 9


def test_synthetic_checkout_marks_session():
    pairing = pair_sessions([_ev(1, IN, 9), _ev(2, OUT, 17, synthetic=True)])

    assert pairing.sessions[0].synthetic_out is True


def test_no_events():
    pairing = pair_sessions([])

    assert pairing.sessions == ()
    assert pairing.open_checkin is None
