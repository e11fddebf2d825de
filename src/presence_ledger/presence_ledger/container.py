from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_ADMIN_PASSWORD,
    DEFAULT_AFTER_CUTOFF_MINUTES,
    DEFAULT_CUTOFF_HOUR,
    DEFAULT_EOD_HOUR,
    DEFAULT_EOD_MINUTE,
    DEFAULT_PENDING_DEADLINE_HOUR,
)
from .core.exceptions import ValidationError
from .database.connection import DBConfig, DatabaseConnection
from .identities.json_identity_repository import JsonIdentityRepository
from .identities.mysql_identity_repository import MySQLIdentityRepository
from .identities.repository import IdentityRepository
from .identities.service import IdentityService
from .ledger.json_event_repository import JsonEventRepository
from .ledger.mysql_event_repository import MySQLEventRepository
from .ledger.repository import EventRepository
from .ledger.service import LedgerService
from .pending.json_pending_repository import JsonPendingRepository
from .pending.service import PendingSignoutService
from .presence import PresenceLedger
from .reports.service import WeeklyReportService
from .security.service import AdminAuthService, EncryptionService
from .security.settings_repository import JsonSettingsRepository
from .status.service import StatusResolver
from .storage.json_store import JsonCollectionStore
from .summary.factory import AutoClosePolicyFactory
from .summary.service import SummaryService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    identities_repo: IdentityRepository
    events_repo: EventRepository
    pending_repo: JsonPendingRepository
    settings_repo: JsonSettingsRepository

    encryption_service: EncryptionService
    admin_auth_service: AdminAuthService
    identity_service: IdentityService
    ledger_service: LedgerService
    status_resolver: StatusResolver
    attendance_service: AttendanceService
    policy_factory: AutoClosePolicyFactory
    summary_service: SummaryService
    pending_service: PendingSignoutService
    report_service: WeeklyReportService

    ledger: PresenceLedger


def build_container(
    *,
    data_dir: Path,
    storage_backend: str = "json",
    db_config: Optional[dict] = None,
    admin_default_password: str = DEFAULT_ADMIN_PASSWORD,
    cutoff_hour: int = DEFAULT_CUTOFF_HOUR,
    eod_hour: int = DEFAULT_EOD_HOUR,
    eod_minute: int = DEFAULT_EOD_MINUTE,
    after_cutoff_minutes: int = DEFAULT_AFTER_CUTOFF_MINUTES,
    pending_deadline_hour: int = DEFAULT_PENDING_DEADLINE_HOUR,
) -> Container:
    data_dir = Path(data_dir)

    settings_repo = JsonSettingsRepository(data_dir / "settings.json")
    encryption_service = EncryptionService(settings_repo)
    admin_auth_service = AdminAuthService(settings_repo, default_password=admin_default_password)
    session_provider = encryption_service.current_session

    conn: Optional[DatabaseConnection] = None
    encrypted_stores: Tuple[JsonCollectionStore, ...]
    if storage_backend == "json":
        identities_repo = JsonIdentityRepository(data_dir / "identities.json", session_provider=session_provider)
        events_repo = JsonEventRepository(data_dir / "events.json", session_provider=session_provider)
        encrypted_stores = (identities_repo.store, events_repo.store)
    elif storage_backend == "mysql":
        if not db_config:
            raise ValidationError("STORAGE_BACKEND=mysql needs DB_CONFIG")
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
        identities_repo = MySQLIdentityRepository(conn, session_provider=session_provider)
        events_repo = MySQLEventRepository(conn, session_provider=session_provider)
        encrypted_stores = ()
    else:
        raise ValidationError(f"Unknown storage backend {storage_backend!r}")

    pending_repo = JsonPendingRepository(data_dir / "pending_signouts.json", session_provider=session_provider)
    encrypted_stores = encrypted_stores + (pending_repo.store,)

    identity_service = IdentityService(identities_repo, session_provider=session_provider)
    ledger_service = LedgerService(events_repo)
    status_resolver = StatusResolver(events_repo, identities_repo)
    attendance_service = AttendanceService(events_repo, identities_repo, status_resolver, session_provider=session_provider)
    policy_factory = AutoClosePolicyFactory(
        cutoff_hour=cutoff_hour,
        eod_hour=eod_hour,
        eod_minute=eod_minute,
        after_minutes=after_cutoff_minutes,
    )
    summary_service = SummaryService(
        events_repo,
        identities_repo,
        policy_factory=policy_factory,
        session_provider=session_provider,
    )
    pending_service = PendingSignoutService(
        pending_repo,
        events_repo,
        identities_repo,
        summary_service,
        deadline_hour=pending_deadline_hour,
        session_provider=session_provider,
    )
    report_service = WeeklyReportService(events_repo, identities_repo, status_resolver)

    ledger = PresenceLedger(
        identities=identity_service,
        ledger=ledger_service,
        attendance=attendance_service,
        status=status_resolver,
        summaries=summary_service,
        encryption=encryption_service,
        pending=pending_service,
        reports=report_service,
        encrypted_stores=encrypted_stores,
    )

    return Container(
        conn=conn,
        identities_repo=identities_repo,
        events_repo=events_repo,
        pending_repo=pending_repo,
        settings_repo=settings_repo,
        encryption_service=encryption_service,
        admin_auth_service=admin_auth_service,
        identity_service=identity_service,
        ledger_service=ledger_service,
        status_resolver=status_resolver,
        attendance_service=attendance_service,
        policy_factory=policy_factory,
        summary_service=summary_service,
        pending_service=pending_service,
        report_service=report_service,
        ledger=ledger,
    )


def build_container_from_settings(settings, overrides: Optional[Mapping[str, Any]] = None) -> Container:
    """Wire the container from a settings module (see ``config``), with per-key overrides."""
    overrides = dict(overrides or {})

    def setting(name: str, default: Any = None) -> Any:
        return overrides.get(name, getattr(settings, name, default))

    return build_container(
        data_dir=setting("DATA_DIR", "data"),
        storage_backend=setting("STORAGE_BACKEND", "json"),
        db_config=setting("DB_CONFIG"),
        admin_default_password=setting("ADMIN_DEFAULT_PASSWORD", DEFAULT_ADMIN_PASSWORD),
        cutoff_hour=setting("CUTOFF_HOUR", DEFAULT_CUTOFF_HOUR),
        eod_hour=setting("EOD_HOUR", DEFAULT_EOD_HOUR),
        eod_minute=setting("EOD_MINUTE", DEFAULT_EOD_MINUTE),
        after_cutoff_minutes=setting("AFTER_CUTOFF_MINUTES", DEFAULT_AFTER_CUTOFF_MINUTES),
        pending_deadline_hour=setting("PENDING_DEADLINE_HOUR", DEFAULT_PENDING_DEADLINE_HOUR),
    )
