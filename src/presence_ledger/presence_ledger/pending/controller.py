from __future__ import annotations

from flask import Flask, request

from ..common.web import admin_required, fail, json_body, ok, parse_day, result_response
from ..container import Container
from ..core.enums import PendingStatus, RejectionReason
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    ledger = container.ledger
    pending = container.pending_service

    @app.route("/api/pending", methods=["GET"], endpoint="pending_list")
    @admin_required
    def pending_list():
        status = request.args.get("status")
        try:
            wanted = PendingStatus(status) if status else None
        except ValueError:
            raise ValidationError(f"Unknown pending status {status!r}")
        return ok(pending.list(wanted))

    @app.route("/api/pending/stats", methods=["GET"], endpoint="pending_stats")
    @admin_required
    def pending_stats():
        return ok(pending.stats())

    @app.route("/api/pending/open", methods=["POST"], endpoint="pending_open")
    @admin_required
    def pending_open():
        return result_response(ledger.open_pending_for_day(parse_day(json_body().get("day", ""))), 201)

    @app.route("/api/pending/<pending_id>/resolve", methods=["POST"], endpoint="pending_resolve")
    @admin_required
    def pending_resolve(pending_id: str):
        body = json_body()
        return result_response(
            ledger.resolve_pending(
                pending_id,
                check_out=body.get("check_out"),
                present_only=bool(body.get("present_only")),
            )
        )

    @app.route("/api/pending/expire", methods=["POST"], endpoint="pending_expire")
    @admin_required
    def pending_expire():
        return result_response(ledger.expire_pending())

    @app.route("/api/pending/token/<token>", methods=["GET"], endpoint="pending_by_token")
    def pending_by_token(token: str):
        record = pending.find_by_token(token)
        if not record or not record.is_pending:
            return fail(RejectionReason.NOT_FOUND, "Pending record not found")
        return ok(
            {
                "pending_id": record.pending_id,
                "display_name": record.display_name,
                "check_in_at": record.check_in_at,
                "deadline": record.deadline,
            }
        )
