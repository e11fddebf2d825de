from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

from ..common.datetime_utils import format_timestamp, parse_timestamp
from ..core.constants import PENDING_SENSITIVE_FIELDS
from ..core.enums import PendingStatus
from ..security.cipher import CipherSession
from ..storage.json_store import JsonCollectionStore
from .model import PendingSignout
from .repository import PendingRepository

logger = logging.getLogger(__name__)


def _ts(value: Optional[Any]) -> Optional[str]:
    return format_timestamp(value) if value else None


def row_to_pending(row: Dict[str, Any]) -> Optional[PendingSignout]:
    check_in_at = parse_timestamp(row.get("check_in_at"))
    created_at = parse_timestamp(row.get("created_at"))
    deadline = parse_timestamp(row.get("deadline"))
    if not (row.get("pending_id") and check_in_at and created_at and deadline):
        return None
    try:
        status = PendingStatus(row.get("status") or PendingStatus.PENDING.value)
    except ValueError:
        return None
    event_id = row.get("check_in_event_id")
    return PendingSignout(
        pending_id=str(row["pending_id"]),
        identity_id=str(row.get("identity_id") or ""),
        display_name=row.get("display_name") or "",
        email=row.get("email") or None,
        check_in_at=check_in_at,
        check_in_event_id=int(event_id) if event_id is not None else None,
        token=row.get("token") or "",
        created_at=created_at,
        deadline=deadline,
        status=status,
        resolved_at=parse_timestamp(row.get("resolved_at")),
        resolved_by=row.get("resolved_by"),
        submitted_check_out=parse_timestamp(row.get("submitted_check_out")),
        present_only=bool(row.get("present_only", False)),
    )


def pending_to_row(record: PendingSignout) -> Dict[str, Any]:
    return {
        "pending_id": record.pending_id,
        "identity_id": record.identity_id,
        "display_name": record.display_name,
        "email": record.email or "",
        "check_in_at": format_timestamp(record.check_in_at),
        "check_in_event_id": record.check_in_event_id,
        "token": record.token,
        "created_at": format_timestamp(record.created_at),
        "deadline": format_timestamp(record.deadline),
        "status": record.status.value,
        "resolved_at": _ts(record.resolved_at),
        "resolved_by": record.resolved_by,
        "submitted_check_out": _ts(record.submitted_check_out),
        "present_only": record.present_only,
    }


class JsonPendingRepository(PendingRepository):
    def __init__(self, path: Path, *, session_provider: Optional[Callable[[], CipherSession]] = None):
        self.store = JsonCollectionStore(
            path,
            sensitive_fields=PENDING_SENSITIVE_FIELDS,
            session_provider=session_provider,
        )

    def list(self) -> Sequence[PendingSignout]:
        records = []
        for row in self.store.load():
            record = row_to_pending(row)
            if record is None:
                logger.warning("Skipped malformed pending row %s", row.get("pending_id"))
                continue
            records.append(record)
        return records

    def get(self, pending_id: str) -> Optional[PendingSignout]:
        return next((r for r in self.list() if r.pending_id == pending_id), None)

    def find_by_token(self, token: str) -> Optional[PendingSignout]:
        if not token:
            return None
        return next((r for r in self.list() if r.token == token), None)

    def save(self, record: PendingSignout) -> PendingSignout:
        with self.store.transaction() as rows:
            for i, row in enumerate(rows):
                if row.get("pending_id") == record.pending_id:
                    rows[i] = pending_to_row(record)
                    break
            else:
                rows.append(pending_to_row(record))
        return record
