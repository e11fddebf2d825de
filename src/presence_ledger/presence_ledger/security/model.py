from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class LedgerSettings:
    """Persisted security settings. The passphrase itself is never stored."""

    encryption_enabled: bool = False
    passphrase_hash: Optional[str] = None
    encryption_updated_at: Optional[datetime] = None
    admin_password_hash: Optional[str] = None
