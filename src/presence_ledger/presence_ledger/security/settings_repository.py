from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Protocol

from ..common.datetime_utils import format_timestamp, parse_timestamp
from ..storage.json_store import JsonDocumentStore
from .model import LedgerSettings


class SettingsRepository(Protocol):
    def get(self) -> LedgerSettings:
        raise NotImplementedError

    def save(self, settings: LedgerSettings) -> None:
        raise NotImplementedError


class JsonSettingsRepository(SettingsRepository):
    """Settings kept in ``settings.json`` next to the data files."""

    def __init__(self, path: Path):
        self._store = JsonDocumentStore(path)

    def get(self) -> LedgerSettings:
        doc = self._store.load()
        encryption = doc.get("encryption") or {}
        return LedgerSettings(
            encryption_enabled=bool(encryption.get("enabled", False)),
            passphrase_hash=encryption.get("passphrase_hash"),
            encryption_updated_at=parse_timestamp(encryption.get("updated_at")),
            admin_password_hash=doc.get("admin_password_hash"),
        )

    def save(self, settings: LedgerSettings) -> None:
        doc = self._store.load()
        doc["encryption"] = {
            "enabled": settings.encryption_enabled,
            "algorithm": "fernet-pbkdf2-sha256",
            "passphrase_hash": settings.passphrase_hash,
            "updated_at": format_timestamp(settings.encryption_updated_at) if settings.encryption_updated_at else None,
        }
        doc["admin_password_hash"] = settings.admin_password_hash
        self._store.save(doc)


class InMemorySettingsRepository(SettingsRepository):
    """Settings held in process memory; used when no data directory is configured."""

    def __init__(self, settings: LedgerSettings | None = None):
        self._settings = settings or LedgerSettings()

    def get(self) -> LedgerSettings:
        return self._settings

    def save(self, settings: LedgerSettings) -> None:
        self._settings = replace(settings)
