"""End-of-day job: auto-close open sessions, or open pending sign-outs instead.

Usage:
    python scripts/close_day.py [YYYY-MM-DD] [--pending]

Defaults to yesterday. With ``--pending`` open sessions become pending
sign-out records rather than synthetic checkouts; overdue pending records are
expired on every run.
"""

from __future__ import annotations

import importlib
import sys
from datetime import date, timedelta
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.presence_ledger.presence_ledger.common.datetime_utils import parse_iso_date
from src.presence_ledger.presence_ledger.common.logging_setup import configure_logging
from src.presence_ledger.presence_ledger.container import build_container_from_settings


def main(argv: list[str]) -> int:
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", None))
    container = build_container_from_settings(settings)
    ledger = container.ledger

    args = [a for a in argv if not a.startswith("--")]
    day = parse_iso_date(args[0]) if args else date.today() - timedelta(days=1)

    expired = ledger.expire_pending()
    if not expired.ok:
        print(f"FAILED: {expired.rejection.message}")
        return 1
    print(f"OK: Expired {expired.value.expired_count} pending sign-outs")

    if "--pending" in argv:
        opened = ledger.open_pending_for_day(day)
        if not opened.ok:
            print(f"FAILED: {opened.rejection.message}")
            return 1
        print(f"OK: Opened {len(opened.value)} pending sign-outs for {day.isoformat()}")
        return 0

    report = ledger.daily_summary_with_auto_close(day, container.policy_factory.hybrid())
    if not report.ok:
        print(f"FAILED: {report.rejection.message}")
        return 1
    closed = sum(1 for s in report.value if s.autoclosed)
    print(f"OK: {day.isoformat()} -> {len(report.value)} identities, {closed} auto-closed, {report.value.total_hours} h")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
