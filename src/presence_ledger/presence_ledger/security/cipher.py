"""Reversible field-level encryption for sensitive record values.

Values are JSON-encoded, then sealed as Fernet tokens under a key derived from
the passphrase with PBKDF2-HMAC-SHA256. Each encrypted field gets a sibling
``<field>_encrypted: True`` marker so mixed plaintext/ciphertext collections
can be read back field by field.

The passphrase only ever lives in a :class:`CipherSession`; nothing here keeps
ambient state.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Iterable, Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..core.constants import ENCRYPTED_MARKER_SUFFIX, KEY_DERIVATION_ITERATIONS, KEY_DERIVATION_SALT
from ..core.exceptions import DomainError, EncryptionLockedError

logger = logging.getLogger(__name__)


class CipherError(DomainError):
    """Raised when a token cannot be decrypted with the session passphrase."""


@dataclass(frozen=True)
class CipherSession:
    enabled: bool = False
    passphrase: Optional[str] = None

    @property
    def active(self) -> bool:
        return bool(self.enabled and self.passphrase)


def require_unlocked(session: CipherSession) -> None:
    if session.enabled and not session.active:
        raise EncryptionLockedError("Encryption is on but locked; unlock with the passphrase before writing")


def marker_for(field: str) -> str:
    return field + ENCRYPTED_MARKER_SUFFIX


@lru_cache(maxsize=8)
def _fernet(passphrase: str) -> Fernet:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=KEY_DERIVATION_SALT,
        iterations=KEY_DERIVATION_ITERATIONS,
    )
    key = base64.urlsafe_b64encode(kdf.derive(passphrase.encode("utf-8")))
    return Fernet(key)


def encrypt_value(value: Any, passphrase: str) -> str:
    token = _fernet(passphrase).encrypt(json.dumps(value).encode("utf-8"))
    return token.decode("ascii")


def decrypt_value(token: str, passphrase: str) -> Any:
    try:
        plain = _fernet(passphrase).decrypt(token.encode("ascii"))
    except (InvalidToken, UnicodeEncodeError, AttributeError) as e:
        raise CipherError("Invalid passphrase or corrupted data") from e
    return json.loads(plain.decode("utf-8"))


def encrypt_fields(record: Dict[str, Any], fields: Iterable[str], session: CipherSession) -> Dict[str, Any]:
    """Return a copy of ``record`` with truthy ``fields`` encrypted.

    Identity function when the session is not active. Fields already carrying
    the marker are left alone.
    """
    if not session.active:
        return record

    out = dict(record)
    for field in fields:
        if out.get(field) and not out.get(marker_for(field)):
            out[field] = encrypt_value(out[field], session.passphrase)
            out[marker_for(field)] = True
    return out


def decrypt_fields(record: Dict[str, Any], fields: Iterable[str], session: CipherSession) -> Dict[str, Any]:
    """Return a copy of ``record`` with marked ``fields`` decrypted.

    A value that does not decrypt (wrong passphrase, tampered token) is kept as
    stored, marker included, so a later write does not lose it.
    """
    if not session.active:
        return record

    out = dict(record)
    for field in fields:
        marker = marker_for(field)
        if out.get(field) and out.get(marker):
            try:
                out[field] = decrypt_value(out[field], session.passphrase)
            except CipherError:
                logger.warning("Could not decrypt field %r; leaving ciphertext in place", field)
                continue
            del out[marker]
    return out
