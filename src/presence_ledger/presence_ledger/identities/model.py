from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import IdentityRole


@dataclass(frozen=True)
class Identity:
    """Domain entity: a person authorized to use the lab.

    Note: pure data object, no storage access here.
    """

    identity_id: str
    display_name: str
    email: Optional[str]
    active: bool
    added_at: datetime
    role: IdentityRole = IdentityRole.VOLUNTEER
    expected_hours_per_week: float = 0.0
    expected_days_per_week: float = 0.0
