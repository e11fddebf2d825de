from __future__ import annotations

from .cap_only_policy import CapOnlyPolicy


class WriteBackPolicy(CapOnlyPolicy):
    """Same close time as cap-only, persisted as a synthetic checkout."""

    name = "write_back"
    writes_back = True
