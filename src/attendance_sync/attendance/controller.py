from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, send_file

from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..core.enums import ReportPeriod
from ..core.exceptions import DomainError, UpstreamError, ValidationError
from ..reports.export import report_to_workbook

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def register(app: Flask, container: Container) -> None:
    def json_errors(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"statusCode": 400, "message": str(e)}), 400
            except UpstreamError as e:
                logger.warning("Upstream failure in %s: %s", request.path, e)
                return jsonify({"statusCode": 502, "message": str(e)}), 502
            except DomainError as e:
                logger.exception("Request %s failed", request.path)
                return jsonify({"statusCode": 500, "message": str(e)}), 500

        return wrapper

    def ok(message: str, response=None):
        return jsonify({"statusCode": 200, "message": message, "response": response}), 200

    @app.route("/api/transactions/fetch", methods=["GET", "POST"], endpoint="fetch_transactions")
    @json_errors
    def fetch_transactions():
        result = container.onsite_service.poll(raise_notification_errors=True)
        return ok("Transactions fetched successfully.", result.as_dict())

    @app.route("/api/device/token", methods=["POST"], endpoint="device_token")
    @json_errors
    def device_token():
        data = request.get_json(silent=True) or {}
        container.onsite_service.refresh_token(data.get("username"), data.get("password"))
        # the token itself stays server-side
        return ok("JWT Token fetched successfully.", {"refreshed": True})

    @app.route("/api/clockify/poll", methods=["GET", "POST"], endpoint="poll_clockify")
    @json_errors
    def poll_clockify():
        result = container.remote_service.poll(raise_notification_errors=True)
        return ok("Data fetched successfully.", result.as_dict())

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="attendance_report")
    @json_errors
    def attendance_report():
        try:
            start = parse_iso_date(request.args.get("start", ""))
            end = parse_iso_date(request.args.get("end", ""))
        except ValueError:
            raise ValidationError("start and end must be YYYY-MM-DD dates")
        try:
            period = ReportPeriod((request.args.get("period") or "daily").lower())
        except ValueError:
            raise ValidationError("period must be daily, weekly or monthly")

        report = container.report_service.build_report(start=start, end=end, period=period)

        if (request.args.get("format") or "json").lower() == "xlsx":
            return send_file(
                report_to_workbook(report),
                download_name=f"attendance_{start.isoformat()}_{end.isoformat()}.xlsx",
                as_attachment=True,
                mimetype=XLSX_MIMETYPE,
            )

        return ok(
            "Report built successfully.",
            {
                "rows": [r.as_dict() for r in report.rows],
                "summary": [s.as_dict() for s in report.summary],
            },
        )
