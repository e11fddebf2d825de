from __future__ import annotations

import pytest

from src.presence_ledger.presence_ledger.security.cipher import (
    CipherError,
    CipherSession,
    decrypt_fields,
    decrypt_value,
    encrypt_fields,
    encrypt_value,
)


def test_value_round_trip_keeps_json_type():
    token = encrypt_value({"name": "Ada", "hours": 3.5}, "s3cret")

    assert token != "Ada"
    assert decrypt_value(token, "s3cret") == {"name": "Ada", "hours": 3.5}


def test_wrong_passphrase_raises_cipher_error():
    token = encrypt_value("Ada", "s3cret")

    with pytest.raises(CipherError):
        decrypt_value(token, "other")


def test_inactive_session_is_identity():
    row = {"display_name": "Ada", "email": "ada@example.org"}

    assert encrypt_fields(row, ("display_name",), CipherSession()) is row
    assert encrypt_fields(row, ("display_name",), CipherSession(enabled=True)) is row
    assert decrypt_fields(row, ("display_name",), CipherSession(enabled=True)) is row


def test_fields_get_marker_and_decrypt_back():
    session = CipherSession(enabled=True, passphrase="s3cret")
    row = {"identity_id": "10000001", "display_name": "Ada", "email": ""}

    stored = encrypt_fields(row, ("display_name", "email"), session)

    assert stored["display_name"] != "Ada"
    assert stored["display_name_encrypted"] is True
    # empty values are left as they are
    assert stored["email"] == ""
    assert "email_encrypted" not in stored
    assert stored["identity_id"] == "10000001"

    back = decrypt_fields(stored, ("display_name", "email"), session)
    assert back == row


def test_already_marked_field_is_not_encrypted_twice():
    session = CipherSession(enabled=True, passphrase="s3cret")
    once = encrypt_fields({"display_name": "Ada"}, ("display_name",), session)

    twice = encrypt_fields(once, ("display_name",), session)

    assert twice == once


def test_undecryptable_field_keeps_ciphertext_and_marker():
    stored = encrypt_fields({"display_name": "Ada"}, ("display_name",), CipherSession(enabled=True, passphrase="a"))

    read = decrypt_fields(stored, ("display_name",), CipherSession(enabled=True, passphrase="b"))

    assert read["display_name"] == stored["display_name"]
    assert read["display_name_encrypted"] is True
