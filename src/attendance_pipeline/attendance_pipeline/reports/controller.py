from __future__ import annotations

from flask import Flask, request

from ..common.http import current_caller, json_body, ok, optional_date_arg, optional_int, require_field
from ..container import Container
from ..core.enums import LeaderboardCategory, ReportType, Timeframe
from ..core.exceptions import ValidationError
from .export import report_filename, report_to_csv
from .model import ReportFilters


def register(app: Flask, container: Container) -> None:
    def _filters() -> ReportFilters:
        return ReportFilters(
            subject_id=optional_int(request.args.get("subject_id"), "subject_id"),
            student_id=optional_int(request.args.get("student_id"), "student_id"),
            start=optional_date_arg("start"),
            end=optional_date_arg("end"),
        )

    @app.route("/api/leaderboard", methods=["GET"], endpoint="leaderboard")
    def leaderboard():
        caller = current_caller(container.directory)
        timeframe = request.args.get("timeframe") or Timeframe.MONTH.value
        category = request.args.get("category") or LeaderboardCategory.ATTENDANCE.value
        entries = container.leaderboard_service.leaderboard(caller=caller, timeframe=timeframe, category=category)
        return ok(timeframe=timeframe, category=category, entries=[e.to_dict() for e in entries])

    @app.route("/api/reports/recognition-stats", methods=["GET"], endpoint="recognition_stats")
    def recognition_stats():
        caller = current_caller(container.directory)
        stats = container.report_service.recognition_stats(
            caller=caller,
            subject_id=optional_int(request.args.get("subject_id"), "subject_id"),
            start=optional_date_arg("start"),
            end=optional_date_arg("end"),
        )
        return ok(stats=stats)

    @app.route("/api/reports/<string:report_type>", methods=["GET"], endpoint="generate_report")
    def generate_report(report_type: str):
        caller = current_caller(container.directory)
        as_csv = report_type.endswith(".csv")
        if as_csv:
            report_type = report_type[: -len(".csv")]
        if report_type not in {t.value for t in ReportType}:
            raise ValidationError(f"Unknown report type: {report_type}")

        report = container.report_service.generate(caller=caller, report_type=report_type, filters=_filters())
        if not as_csv:
            return ok(report=report.to_dict())

        return app.response_class(
            report_to_csv(report).encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={report_filename(report)}"},
        )

    @app.route("/api/reports/<string:report_type>/email", methods=["POST"], endpoint="email_report")
    def email_report(report_type: str):
        caller = current_caller(container.directory)
        data = json_body()
        result = container.report_service.email_report(
            caller=caller,
            report_type=report_type,
            recipients=require_field(data, "recipients"),
            subject=str(require_field(data, "subject")),
            message=data.get("message"),
            filters=_filters(),
        )
        return ok(**result)
