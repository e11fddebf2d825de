"""Seed a demo roster and one day of events into the configured backend."""

from __future__ import annotations

import importlib
import sys
from datetime import datetime, timedelta
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.presence_ledger.presence_ledger.container import build_container_from_settings
from src.presence_ledger.presence_ledger.core.enums import EventKind

DEMO_IDENTITIES = [
    ("10000001", "Ada Lovelace", "ada@example.org", {"role": "researcher", "expected_hours_per_week": 20}),
    ("10000002", "Alan Turing", "alan@example.org", {"role": "volunteer", "expected_hours_per_week": 6}),
    ("10000003", "Grace Hopper", "", {"role": "staff", "expected_days_per_week": 5}),
]


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container_from_settings(settings)
    ledger = container.ledger

    for identity_id, name, email, meta in DEMO_IDENTITIES:
        result = ledger.add_identity(identity_id, name, email, meta)
        if not result.ok:
            raise SystemExit(f"Could not seed {identity_id}: {result.rejection.message}")

    yesterday = (datetime.now() - timedelta(days=1)).replace(hour=9, minute=0, second=0, microsecond=0)
    ledger.record_event("10000001", EventKind.CHECKIN, now=yesterday)
    ledger.record_event("10000001", EventKind.CHECKOUT, now=yesterday + timedelta(hours=3, minutes=30))
    ledger.record_event("10000002", EventKind.CHECKIN, now=yesterday + timedelta(hours=7, minutes=45))

    print(f"OK: Seeded {len(DEMO_IDENTITIES)} identities and demo events for {yesterday.date().isoformat()}")


if __name__ == "__main__":
    main()
