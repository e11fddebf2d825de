from __future__ import annotations

from typing import Callable, Optional, Sequence

from ..core.constants import IDENTITY_SENSITIVE_FIELDS
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..security.cipher import CipherSession, decrypt_fields, encrypt_fields, marker_for
from .json_identity_repository import identity_to_row, row_to_identity
from .model import Identity
from .repository import IdentityRepository

_COLUMNS = """
    identity_id, display_name, display_name_encrypted, email, email_encrypted,
    active, added_at, role, expected_hours_per_week, expected_days_per_week
"""


class MySQLIdentityRepository(IdentityRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, session_provider: Optional[Callable[[], CipherSession]] = None):
        self._conn_factory = conn_factory
        self._session_provider = session_provider or CipherSession

    def _decode(self, row: dict) -> Identity:
        return row_to_identity(decrypt_fields(row, IDENTITY_SENSITIVE_FIELDS, self._session_provider()))

    def get(self, identity_id: str) -> Optional[Identity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM identities WHERE identity_id=%s", (identity_id,))
            row = fetchone(cur)
            return self._decode(row) if row else None

    def list(self) -> Sequence[Identity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM identities ORDER BY identity_id")
            return [self._decode(r) for r in fetchall(cur)]

    def upsert(self, identity: Identity) -> Identity:
        row = encrypt_fields(identity_to_row(identity), IDENTITY_SENSITIVE_FIELDS, self._session_provider())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                REPLACE INTO identities(
                    identity_id, display_name, display_name_encrypted, email, email_encrypted,
                    active, added_at, role, expected_hours_per_week, expected_days_per_week
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    identity.identity_id,
                    row["display_name"],
                    int(bool(row.get(marker_for("display_name")))),
                    row["email"] or None,
                    int(bool(row.get(marker_for("email")))),
                    int(identity.active),
                    identity.added_at,
                    identity.role.value,
                    float(identity.expected_hours_per_week),
                    float(identity.expected_days_per_week),
                ),
            )
        return identity

    def delete(self, identity_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM identities WHERE identity_id=%s", (identity_id,))
            return cur.rowcount > 0
