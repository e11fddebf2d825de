from .enums import RejectionReason


class DomainError(Exception):
    """Base exception for business rule violations."""

    reason = RejectionReason.INVALID


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when an admin password or passphrase does not match."""

    reason = RejectionReason.UNAUTHORIZED


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""

    reason = RejectionReason.UNAUTHORIZED


class UnauthorizedError(DomainError):
    """Raised when an identity is not on the active roster."""

    reason = RejectionReason.UNAUTHORIZED


class DuplicateEventError(DomainError):
    """Raised when an event would break the checkin/checkout alternation."""

    reason = RejectionReason.DUPLICATE


class NoOpenSessionError(DomainError):
    """Raised on a checkout for an identity that never checked in."""

    reason = RejectionReason.NO_OPEN_SESSION


class NotFoundError(DomainError):
    """Raised when an identity, event or pending record id is absent."""

    reason = RejectionReason.NOT_FOUND


class StorageError(DomainError):
    """Raised when the persistence layer fails mid-operation.

    In-memory and on-disk state may disagree after this error.
    """

    reason = RejectionReason.IO_FAILURE


class EncryptionLockedError(DomainError):
    """Raised on a write while encryption is on but no passphrase is unlocked.

    Rows read in that state still hold ciphertext, so writing them back or
    snapshotting names from them would store sealed values as plain text.
    """

    reason = RejectionReason.IO_FAILURE
