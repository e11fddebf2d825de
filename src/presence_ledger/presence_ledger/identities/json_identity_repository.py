from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

from ..common.datetime_utils import format_timestamp, now_local, parse_timestamp
from ..core.constants import IDENTITY_SENSITIVE_FIELDS
from ..core.enums import IdentityRole
from ..security.cipher import CipherSession
from ..storage.json_store import JsonCollectionStore
from .model import Identity
from .repository import IdentityRepository

logger = logging.getLogger(__name__)


def _role(value: Any) -> IdentityRole:
    try:
        return IdentityRole(str(value or IdentityRole.VOLUNTEER.value).lower())
    except ValueError:
        return IdentityRole.VOLUNTEER


def row_to_identity(row: Dict[str, Any]) -> Identity:
    # Older rows may lack the weekly expectation fields.
    return Identity(
        identity_id=str(row["identity_id"]),
        display_name=row.get("display_name") or "",
        email=row.get("email") or None,
        active=bool(row.get("active", True)),
        added_at=parse_timestamp(row.get("added_at")) or now_local(),
        role=_role(row.get("role")),
        expected_hours_per_week=float(row.get("expected_hours_per_week") or 0),
        expected_days_per_week=float(row.get("expected_days_per_week") or 0),
    )


def identity_to_row(identity: Identity) -> Dict[str, Any]:
    return {
        "identity_id": identity.identity_id,
        "display_name": identity.display_name,
        "email": identity.email or "",
        "active": identity.active,
        "added_at": format_timestamp(identity.added_at),
        "role": identity.role.value,
        "expected_hours_per_week": identity.expected_hours_per_week,
        "expected_days_per_week": identity.expected_days_per_week,
    }


class JsonIdentityRepository(IdentityRepository):
    def __init__(self, path: Path, *, session_provider: Optional[Callable[[], CipherSession]] = None):
        self.store = JsonCollectionStore(
            path,
            sensitive_fields=IDENTITY_SENSITIVE_FIELDS,
            session_provider=session_provider,
        )

    def get(self, identity_id: str) -> Optional[Identity]:
        for row in self.store.load():
            if str(row.get("identity_id")) == identity_id:
                return row_to_identity(row)
        return None

    def list(self) -> Sequence[Identity]:
        return [row_to_identity(r) for r in self.store.load() if r.get("identity_id")]

    def upsert(self, identity: Identity) -> Identity:
        with self.store.transaction() as rows:
            for i, row in enumerate(rows):
                if str(row.get("identity_id")) == identity.identity_id:
                    rows[i] = identity_to_row(identity)
                    break
            else:
                rows.append(identity_to_row(identity))
        return identity

    def delete(self, identity_id: str) -> bool:
        with self.store.transaction() as rows:
            kept = [r for r in rows if str(r.get("identity_id")) != identity_id]
            removed = len(kept) != len(rows)
            rows[:] = kept
        return removed
