"""Example: drive the ledger through the service layer (no Flask).

Controllers stay thin; everything below goes through PresenceLedger.
"""

import importlib
from datetime import datetime

from config import get_settings_module

from src.presence_ledger.presence_ledger.container import build_container_from_settings


def main():
    settings = importlib.import_module(get_settings_module())
    ledger = build_container_from_settings(settings).ledger

    ledger.add_identity("10000001", "Ada Lovelace", "ada@example.org", {"role": "researcher"})
    ledger.record_event("10000001", "checkin")
    status = ledger.current_status("10000001")
    print(status.value.value if status.ok else status.rejection.message)

    report = ledger.live_summary(datetime.now().date())
    if not report.ok:
        raise SystemExit(report.rejection.message)
    for summary in report.value:
        print(summary.display_name, summary.total_hours, "absent" if summary.absent else "")


if __name__ == "__main__":
    main()
