from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_identity_id, require_non_empty, require_non_negative
from ..core.enums import IdentityRole
from ..core.exceptions import NotFoundError, ValidationError
from ..security.cipher import CipherSession, require_unlocked
from .model import Identity
from .repository import IdentityRepository

logger = logging.getLogger(__name__)


def _parse_role(value: Any) -> IdentityRole:
    if isinstance(value, IdentityRole):
        return value
    try:
        return IdentityRole(str(value or IdentityRole.VOLUNTEER.value).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown role {value!r}")


class IdentityService:
    """Use case: manage the roster of authorized identities (admin)."""

    def __init__(self, identities: IdentityRepository, *, session_provider: Optional[Callable[[], CipherSession]] = None):
        self._identities = identities
        self._session_provider = session_provider or CipherSession

    def add_or_update(
        self,
        identity_id: str,
        display_name: str,
        email: str = "",
        meta: Optional[Mapping[str, Any]] = None,
        *,
        now: Optional[datetime] = None,
    ) -> Identity:
        """Upsert with replace semantics.

        Fields omitted from ``meta`` reset to their zero/blank defaults rather
        than keeping the stored value; callers resend the full state.
        """
        identity_id = require_identity_id(identity_id)
        require_unlocked(self._session_provider())
        display_name = require_non_empty(display_name, "Display name")
        meta = meta or {}

        identity = Identity(
            identity_id=identity_id,
            display_name=display_name,
            email=(email or "").strip() or None,
            active=True,
            added_at=now or now_local(),
            role=_parse_role(meta.get("role")),
            expected_hours_per_week=require_non_negative(meta.get("expected_hours_per_week"), "Expected hours per week"),
            expected_days_per_week=require_non_negative(meta.get("expected_days_per_week"), "Expected days per week"),
        )

        existed = self._identities.get(identity_id) is not None
        self._identities.upsert(identity)
        logger.info("Identity %s: %s (%s)", "updated" if existed else "added", display_name, identity_id)
        return identity

    def update(self, identity_id: str, **changes: Any) -> Identity:
        """Merge ``changes`` into the stored identity; unknown keys are rejected."""
        require_unlocked(self._session_provider())
        current = self._identities.get(identity_id)
        if not current:
            raise NotFoundError(f"Identity {identity_id} not found")

        allowed = {"display_name", "email", "active", "role", "expected_hours_per_week", "expected_days_per_week"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        patch: dict[str, Any] = {}
        if changes.get("display_name") is not None:
            patch["display_name"] = require_non_empty(changes["display_name"], "Display name")
        if changes.get("email") is not None:
            patch["email"] = changes["email"].strip() or None
        if isinstance(changes.get("active"), bool):
            patch["active"] = changes["active"]
        if changes.get("role") is not None:
            patch["role"] = _parse_role(changes["role"])
        for key in ("expected_hours_per_week", "expected_days_per_week"):
            if changes.get(key) is not None:
                patch[key] = require_non_negative(changes[key], key)

        updated = replace(current, **patch)
        self._identities.upsert(updated)
        logger.info("Identity updated: %s (%s)", updated.display_name, identity_id)
        return updated

    def remove(self, identity_id: str) -> None:
        if not self._identities.delete(identity_id):
            logger.warning("Identity not found for removal: %s", identity_id)
            raise NotFoundError(f"Identity {identity_id} not found")
        logger.info("Identity removed: %s", identity_id)

    def get(self, identity_id: str) -> Optional[Identity]:
        return self._identities.get(identity_id)

    def list(self) -> Sequence[Identity]:
        return list(self._identities.list())

    def is_authorized(self, identity_id: str) -> Optional[Identity]:
        identity = self._identities.get(identity_id)
        if identity and identity.active:
            return identity
        logger.warning("Authorization check failed for %s", identity_id)
        return None
