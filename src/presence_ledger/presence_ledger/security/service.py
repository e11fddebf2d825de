from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_ADMIN_PASSWORD
from ..core.exceptions import AuthenticationError, ValidationError
from .cipher import CipherSession
from .settings_repository import SettingsRepository

logger = logging.getLogger(__name__)


def _safe_check(password_hash: Optional[str], password: str) -> bool:
    if not password_hash or password is None:
        return False
    try:
        return check_password_hash(password_hash, password)
    except (TypeError, ValueError):
        # e.g. placeholder or corrupted hashes
        return False


class EncryptionService:
    """Use case: turn field encryption on/off and hold the passphrase for this process.

    The passphrase is verified against a stored hash but never persisted, so
    after a restart encrypted fields stay unreadable until :meth:`unlock`.
    """

    def __init__(self, settings: SettingsRepository):
        self._settings = settings
        self._session = CipherSession(enabled=settings.get().encryption_enabled)
        logger.info("Encryption settings loaded: %s", "enabled" if self._session.enabled else "disabled")

    @property
    def session(self) -> CipherSession:
        return self._session

    def current_session(self) -> CipherSession:
        return self._session

    def set_encryption(self, enabled: bool, passphrase: Optional[str] = None, *, now: Optional[datetime] = None) -> CipherSession:
        """Persist the new setting and return the session now in effect.

        While stored data is encrypted under a passphrase this process does not
        hold, neither re-keying nor disabling is allowed: the rows could not be
        re-encoded and would stay sealed under a key nobody can verify.
        """
        current = self._settings.get()
        if current.encryption_enabled and current.passphrase_hash and not self._session.passphrase:
            logger.warning("Refusing to change encryption settings while locked")
            raise AuthenticationError("Unlock with the current passphrase before changing encryption settings")
        if enabled and not passphrase and not self._session.passphrase:
            raise ValidationError("A passphrase is required to enable encryption")

        passphrase_hash = current.passphrase_hash
        cached = self._session.passphrase
        if enabled and passphrase:
            passphrase_hash = generate_password_hash(passphrase)
            cached = passphrase

        self._settings.save(
            replace(
                current,
                encryption_enabled=bool(enabled),
                passphrase_hash=passphrase_hash,
                encryption_updated_at=now or now_local(),
            )
        )
        self._session = CipherSession(enabled=bool(enabled), passphrase=cached if enabled else None)
        logger.info("Encryption %s", "enabled" if enabled else "disabled")
        return self._session

    def verify_passphrase(self, passphrase: str) -> bool:
        stored = self._settings.get().passphrase_hash
        if not stored:
            logger.warning("No encryption passphrase set for verification")
            return False
        ok = _safe_check(stored, passphrase)
        if not ok:
            logger.warning("Encryption passphrase verification failed")
        return ok

    def unlock(self, passphrase: str) -> bool:
        """Cache ``passphrase`` for this process if it matches the stored hash."""
        if not self.verify_passphrase(passphrase):
            return False
        self._session = CipherSession(enabled=self._settings.get().encryption_enabled, passphrase=passphrase)
        logger.info("Encryption passphrase unlocked for this process")
        return True

    def lock(self) -> None:
        self._session = CipherSession(enabled=self._session.enabled)


class AdminAuthService:
    """Use case: authenticate the lab administrator."""

    def __init__(self, settings: SettingsRepository, *, default_password: str = DEFAULT_ADMIN_PASSWORD):
        self._settings = settings
        self._default_password = default_password

    def verify_admin(self, password: str) -> None:
        stored = self._settings.get().admin_password_hash
        if not stored:
            logger.warning("No admin password set, falling back to the configured default")
            ok = bool(password) and password == self._default_password
        else:
            ok = _safe_check(stored, password)

        if not ok:
            raise AuthenticationError("Wrong admin password")

    def change_admin_password(self, new_password: str) -> None:
        new_password = require_non_empty(new_password, "Admin password")
        if len(new_password) < 6:
            raise ValidationError("Admin password must be at least 6 characters")
        current = self._settings.get()
        self._settings.save(replace(current, admin_password_hash=generate_password_hash(new_password)))
        logger.info("Admin password changed")
