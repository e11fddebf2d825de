from __future__ import annotations

from flask import Flask, request

from ..common.web import admin_required, json_body, ok, parse_datetime_arg, result_response
from ..container import Container


def register(app: Flask, container: Container) -> None:
    ledger = container.ledger

    @app.route("/api/events", methods=["POST"], endpoint="events_record")
    def events_record():
        """Kiosk endpoint: no admin session, the roster check is the gate."""
        body = json_body()
        result = ledger.record_event(str(body.get("identity_id", "")).strip(), body.get("kind", ""))
        return result_response(result, 201)

    @app.route("/api/status/<identity_id>", methods=["GET"], endpoint="events_status")
    def events_status(identity_id: str):
        result = ledger.current_status(identity_id)
        if not result.ok:
            return result_response(result)
        return ok({"identity_id": identity_id, "status": result.value})

    @app.route("/api/present", methods=["GET"], endpoint="events_present")
    def events_present():
        return result_response(ledger.currently_present())

    @app.route("/api/events", methods=["GET"], endpoint="events_list")
    @admin_required
    def events_list():
        start = request.args.get("start")
        end = request.args.get("end")
        if not start and not end:
            return result_response(ledger.all_events())
        return result_response(
            ledger.events_for_range(parse_datetime_arg(start, "start"), parse_datetime_arg(end, "end"))
        )

    @app.route("/api/events/<int:event_id>", methods=["DELETE"], endpoint="events_delete")
    @admin_required
    def events_delete(event_id: int):
        return result_response(ledger.delete_event(event_id))
