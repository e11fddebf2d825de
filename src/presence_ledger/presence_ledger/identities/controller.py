from __future__ import annotations

from flask import Flask

from ..common.web import admin_required, json_body, result_response
from ..container import Container

_META_KEYS = ("role", "expected_hours_per_week", "expected_days_per_week")


def register(app: Flask, container: Container) -> None:
    ledger = container.ledger

    @app.route("/api/identities", methods=["GET"], endpoint="identities_list")
    @admin_required
    def identities_list():
        return result_response(ledger.list_identities())

    @app.route("/api/identities", methods=["POST"], endpoint="identities_upsert")
    @admin_required
    def identities_upsert():
        body = json_body()
        result = ledger.add_identity(
            str(body.get("identity_id", "")),
            body.get("display_name", ""),
            body.get("email", ""),
            {k: body[k] for k in _META_KEYS if k in body},
        )
        return result_response(result, 201)

    @app.route("/api/identities/<identity_id>", methods=["PATCH"], endpoint="identities_update")
    @admin_required
    def identities_update(identity_id: str):
        changes = {k: v for k, v in json_body().items() if k != "identity_id"}
        return result_response(ledger.update_identity(identity_id, **changes))

    @app.route("/api/identities/<identity_id>", methods=["DELETE"], endpoint="identities_remove")
    @admin_required
    def identities_remove(identity_id: str):
        return result_response(ledger.remove_identity(identity_id))
