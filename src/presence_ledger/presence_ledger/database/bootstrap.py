from __future__ import annotations

import logging
from typing import List

from .connection import DatabaseConnection
from .mysql_base import db_cursor, fetchall

logger = logging.getLogger(__name__)

# Name/email columns are wide enough for Fernet tokens when encryption is on.
SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS identities (
        identity_id CHAR(8) PRIMARY KEY,
        display_name TEXT NOT NULL,
        display_name_encrypted TINYINT(1) NOT NULL DEFAULT 0,
        email TEXT NULL,
        email_encrypted TINYINT(1) NOT NULL DEFAULT 0,
        active TINYINT(1) NOT NULL DEFAULT 1,
        added_at DATETIME(6) NOT NULL,
        role VARCHAR(20) NOT NULL DEFAULT 'volunteer',
        expected_hours_per_week DOUBLE NOT NULL DEFAULT 0,
        expected_days_per_week DOUBLE NOT NULL DEFAULT 0
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS events (
        event_id BIGINT PRIMARY KEY,
        identity_id CHAR(8) NOT NULL,
        display_name TEXT NOT NULL,
        display_name_encrypted TINYINT(1) NOT NULL DEFAULT 0,
        kind VARCHAR(10) NOT NULL,
        at DATETIME(6) NOT NULL,
        synthetic TINYINT(1) NOT NULL DEFAULT 0,
        pending_id VARCHAR(64) NULL,
        pending TINYINT(1) NOT NULL DEFAULT 0,
        INDEX idx_events_at (at, event_id),
        INDEX idx_events_identity (identity_id, at),
        INDEX idx_events_pending (pending_id)
    )
    """,
)


def apply_schema(conn_factory: DatabaseConnection) -> None:
    """Create the roster and ledger tables (idempotent)."""
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        for stmt in SCHEMA_STATEMENTS:
            cur.execute(stmt)
    logger.info("MySQL schema ready")


def list_tables(conn_factory: DatabaseConnection) -> List[str]:
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [str(r[0]) for r in fetchall(cur)]
