from __future__ import annotations

from flask import Flask

from ..common.web import admin_required, ok, result_response
from ..container import Container


def register(app: Flask, container: Container) -> None:
    ledger = container.ledger

    @app.route("/api/reports/weekly", methods=["GET"], endpoint="reports_weekly")
    @admin_required
    def reports_weekly():
        result = ledger.weekly_report()
        if not result.ok:
            return result_response(result)
        report = result.value
        return ok(
            {
                "start": report.start,
                "end": report.end,
                "total_records": report.total_records,
                "identities_with_activity": report.identities_with_activity,
                "identities": report.identities,
            }
        )

    @app.route("/api/stats", methods=["GET"], endpoint="reports_stats")
    @admin_required
    def reports_stats():
        return result_response(ledger.ledger_stats())
