from __future__ import annotations

import json
from datetime import datetime

from src.presence_ledger.presence_ledger.core.enums import IdentityRole
from src.presence_ledger.presence_ledger.identities.json_identity_repository import JsonIdentityRepository
from src.presence_ledger.presence_ledger.identities.model import Identity
from src.presence_ledger.presence_ledger.security.cipher import CipherSession


def _identity(identity_id="10000001", name="Ada Lovelace", email="ada@example.org"):
    return Identity(
        identity_id=identity_id,
        display_name=name,
        email=email,
        active=True,
        added_at=datetime(2026, 3, 1, 8, 0, 0),
        role=IdentityRole.RESEARCHER,
        expected_hours_per_week=20,
    )


def test_upsert_get_list_delete(tmp_path):
    repo = JsonIdentityRepository(tmp_path / "identities.json")

    repo.upsert(_identity())
    repo.upsert(_identity("10000002", "Alan Turing", None))
    repo.upsert(_identity(name="Ada King"))

    assert [i.identity_id for i in repo.list()] == ["10000001", "10000002"]
    assert repo.get("10000001").display_name == "Ada King"
    assert repo.get("10000002").email is None
    assert repo.get("19999999") is None

    assert repo.delete("10000002") is True
    assert repo.delete("10000002") is False
    assert [i.identity_id for i in repo.list()] == ["10000001"]


def test_missing_file_reads_as_empty(tmp_path):
    repo = JsonIdentityRepository(tmp_path / "nothing" / "identities.json")

    assert repo.list() == []


def test_sensitive_fields_encrypted_on_disk(tmp_path):
    session = CipherSession(enabled=True, passphrase="s3cret")
    path = tmp_path / "identities.json"
    repo = JsonIdentityRepository(path, session_provider=lambda: session)

    repo.upsert(_identity())

    raw = json.loads(path.read_text(encoding="utf-8"))[0]
    assert raw["display_name"] != "Ada Lovelace"
    assert raw["display_name_encrypted"] is True
    assert raw["email_encrypted"] is True
    assert raw["identity_id"] == "10000001"
    assert repo.get("10000001").display_name == "Ada Lovelace"


def test_rows_without_optional_fields_still_load(tmp_path):
    path = tmp_path / "identities.json"
    path.write_text(json.dumps([{"identity_id": "10000001", "display_name": "Ada"}]), encoding="utf-8")

    identity = JsonIdentityRepository(path).get("10000001")

    assert identity.active is True
    assert identity.role == IdentityRole.VOLUNTEER
    assert identity.expected_hours_per_week == 0
