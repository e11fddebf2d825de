from __future__ import annotations

from enum import Enum


class IdentityRole(str, Enum):
    """Role on the lab roster; drives weekly expectations only."""

    VOLUNTEER = "volunteer"
    RESEARCHER = "researcher"
    STAFF = "staff"


class EventKind(str, Enum):
    CHECKIN = "checkin"
    CHECKOUT = "checkout"


class PresenceStatus(str, Enum):
    """Current state of an identity, derived from its last ledger event."""

    NEVER_CHECKED_IN = "never_checked_in"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


class RejectionReason(str, Enum):
    """Typed failure outcomes handed back to collaborators."""

    UNAUTHORIZED = "unauthorized"
    DUPLICATE = "duplicate"
    NO_OPEN_SESSION = "no_open_session"
    NOT_FOUND = "not_found"
    IO_FAILURE = "io_failure"
    INVALID = "invalid"


class PendingStatus(str, Enum):
    """Lifecycle of a forgotten-checkout follow-up."""

    PENDING = "pending"
    RESOLVED = "resolved"
    EXPIRED = "expired"
