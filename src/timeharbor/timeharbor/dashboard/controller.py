from __future__ import annotations

import csv
import io
from datetime import date, timedelta

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_user, make_token_required
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)
    dashboard = container.dashboard_service

    def _date_arg(name: str, default: date) -> date:
        raw = request.args.get(name)
        if not raw:
            return default
        try:
            return parse_iso_date(raw)
        except ValueError:
            raise ValidationError(f"{name} must be YYYY-MM-DD")

    def _write_timesheet_csv(*, data, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=["date", "team_id", "hours", "duration"])
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/dashboard/stats", methods=["GET"], endpoint="dashboard_stats")
    @token_required
    def stats():
        return jsonify(dashboard.stats(current_user().id, team_id=request.args.get("teamId") or None))

    @app.route("/dashboard/activity", methods=["GET"], endpoint="dashboard_activity")
    @token_required
    def activity():
        return jsonify(dashboard.recent_activity(current_user().id, team_id=request.args.get("teamId") or None))

    @app.route("/dashboard/timesheet.csv", methods=["GET"], endpoint="dashboard_timesheet_csv")
    @token_required
    def timesheet_csv():
        today = date.today()
        start = _date_arg("start", today - timedelta(days=6))
        end = _date_arg("end", today)
        data = dashboard.timesheet(
            current_user().id,
            start=start,
            end=end,
            team_id=request.args.get("teamId") or None,
        )
        filename = f"timesheet_{start:%Y%m%d}_{end:%Y%m%d}.csv"
        return _write_timesheet_csv(data=data, filename=filename)
