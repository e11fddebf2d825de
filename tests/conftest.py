from __future__ import annotations

from datetime import date, datetime

import pytest

from src.presence_ledger.presence_ledger.container import build_container


@pytest.fixture
def fixed_now() -> datetime:
    # a Tuesday, mid-morning
    return datetime(2026, 3, 10, 9, 0, 0)


@pytest.fixture
def day(fixed_now) -> date:
    return fixed_now.date()


@pytest.fixture
def container(tmp_path):
    return build_container(data_dir=tmp_path)


@pytest.fixture
def ledger(container):
    return container.ledger


@pytest.fixture
def roster(container):
    """Two active identities on a fresh JSON-backed ledger."""
    svc = container.identity_service
    svc.add_or_update("10000001", "Ada Lovelace", "ada@example.org", {"role": "researcher", "expected_hours_per_week": 20})
    svc.add_or_update("10000002", "Alan Turing", "", {"role": "volunteer"})
    return svc
