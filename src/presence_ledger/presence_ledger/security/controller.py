from __future__ import annotations

from flask import Flask, session

from ..common.web import admin_required, fail, json_body, ok, result_response
from ..container import Container
from ..core.enums import RejectionReason


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/login", methods=["POST"], endpoint="admin_login")
    def admin_login():
        container.admin_auth_service.verify_admin(json_body().get("password", ""))
        session["is_admin"] = True
        return ok({"admin": True})

    @app.route("/api/admin/logout", methods=["POST"], endpoint="admin_logout")
    def admin_logout():
        session.pop("is_admin", None)
        return ok({"admin": False})

    @app.route("/api/admin/password", methods=["POST"], endpoint="admin_change_password")
    @admin_required
    def admin_change_password():
        container.admin_auth_service.change_admin_password(json_body().get("new_password", ""))
        return ok()

    @app.route("/api/admin/encryption", methods=["GET"], endpoint="encryption_status")
    @admin_required
    def encryption_status():
        current = container.encryption_service.session
        return ok({"enabled": current.enabled, "unlocked": current.active})

    @app.route("/api/admin/encryption", methods=["POST"], endpoint="encryption_update")
    @admin_required
    def encryption_update():
        body = json_body()
        result = container.ledger.set_encryption(bool(body.get("enabled")), body.get("passphrase") or None)
        if not result.ok:
            return result_response(result)
        return ok({"enabled": result.value.enabled, "unlocked": result.value.active})

    @app.route("/api/admin/encryption/unlock", methods=["POST"], endpoint="encryption_unlock")
    @admin_required
    def encryption_unlock():
        result = container.ledger.unlock(json_body().get("passphrase", ""))
        if not result.ok:
            return result_response(result)
        if not result.value:
            return fail(RejectionReason.UNAUTHORIZED, "Wrong passphrase", 401)
        return ok({"unlocked": True})

    @app.route("/api/admin/encryption/lock", methods=["POST"], endpoint="encryption_lock")
    @admin_required
    def encryption_lock():
        container.ledger.lock()
        return ok({"unlocked": False})
