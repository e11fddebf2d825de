from __future__ import annotations

from flask import Flask, request

from ..common.web import admin_required, json_body, ok, parse_day, result_response
from ..container import Container
from ..core.exceptions import ValidationError


def _hour(value) -> int | None:
    if value in (None, ""):
        return None
    try:
        hour = int(value)
    except (TypeError, ValueError):
        raise ValidationError("hour must be an integer")
    if not 0 <= hour <= 23:
        raise ValidationError("hour must be between 0 and 23")
    return hour


def register(app: Flask, container: Container) -> None:
    ledger = container.ledger
    factory = container.policy_factory

    @app.route("/api/summary/<day>", methods=["GET"], endpoint="summary_preview")
    @admin_required
    def summary_preview(day: str):
        """Read-only: open sessions get the policy's estimate, nothing is written."""
        policy = factory.from_name(request.args.get("policy"), hour=_hour(request.args.get("hour")))
        return result_response(ledger.preview_daily_summary(parse_day(day), policy))

    @app.route("/api/summary/<day>/close", methods=["POST"], endpoint="summary_close")
    @admin_required
    def summary_close(day: str):
        body = json_body()
        policy = factory.from_name(body.get("policy", "hybrid"), hour=_hour(body.get("hour")))
        return result_response(ledger.daily_summary_with_auto_close(parse_day(day), policy))

    @app.route("/api/summary/<day>/live", methods=["GET"], endpoint="summary_live")
    @admin_required
    def summary_live(day: str):
        return result_response(ledger.live_summary(parse_day(day)))

    @app.route("/api/hours/<identity_id>", methods=["GET"], endpoint="summary_hours_so_far")
    def summary_hours_so_far(identity_id: str):
        result = ledger.hours_so_far(identity_id)
        if not result.ok:
            return result_response(result)
        return ok({"identity_id": identity_id, "hours": result.value})
