from __future__ import annotations

from flask import Flask, request

from ..common.http import as_int, current_caller, json_body, ok, optional_date_arg, optional_int, require_field
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sessions/<int:session_id>/attendance", methods=["POST"], endpoint="mark_attendance")
    def mark_attendance(session_id: int):
        caller = current_caller(container.directory)
        data = json_body()
        record_id = container.ledger_service.mark_attendance(
            session_id=session_id,
            student_id=as_int(require_field(data, "student_id"), "student_id"),
            status=str(require_field(data, "status")),
            caller=caller,
            mode=data.get("mode") or "manual",
            notes=data.get("notes"),
        )
        return ok(record_id=record_id)

    @app.route("/api/sessions/<int:session_id>/attendance", methods=["GET"], endpoint="session_attendance")
    def session_attendance(session_id: int):
        caller = current_caller(container.directory)
        records = container.ledger_service.session_records(session_id=session_id, caller=caller)
        return ok(records=[r.to_dict() for r in records])

    @app.route("/api/me/attendance", methods=["GET"], endpoint="my_attendance")
    def my_attendance():
        caller = current_caller(container.directory)
        records = container.ledger_service.student_history(
            caller=caller,
            subject_id=optional_int(request.args.get("subject_id"), "subject_id"),
            start=optional_date_arg("start"),
            end=optional_date_arg("end"),
        )
        return ok(records=[r.to_dict() for r in records])
