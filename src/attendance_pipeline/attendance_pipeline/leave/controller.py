from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_caller, json_body, ok, optional_int, require_field
from ..container import Container
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _date(data: dict, name: str):
        try:
            return parse_iso_date(str(require_field(data, name)))
        except ValueError:
            raise ValidationError(f"{name} must be YYYY-MM-DD")

    @app.route("/api/leave-requests", methods=["POST"], endpoint="submit_leave")
    def submit_leave():
        caller = current_caller(container.directory)
        data = json_body()
        request_id = container.leave_service.submit(
            caller=caller,
            start_date=_date(data, "start_date"),
            end_date=_date(data, "end_date"),
            reason=str(data.get("reason") or ""),
            description=data.get("description"),
            subject_id=optional_int(data.get("subject_id"), "subject_id"),
            teacher_id=optional_int(data.get("teacher_id"), "teacher_id"),
        )
        return ok(201, request_id=request_id)

    @app.route("/api/leave-requests/<int:request_id>/review", methods=["POST"], endpoint="review_leave")
    def review_leave(request_id: int):
        caller = current_caller(container.directory)
        data = json_body()
        container.leave_service.review(
            request_id=request_id,
            status=str(require_field(data, "status")),
            caller=caller,
            notes=data.get("notes"),
        )
        return ok(request_id=request_id)

    @app.route("/api/leave-requests/mine", methods=["GET"], endpoint="my_leave_requests")
    def my_leave_requests():
        caller = current_caller(container.directory)
        limit = optional_int(request.args.get("limit"), "limit") or DEFAULT_LIST_LIMIT
        rows = container.leave_service.list_mine(caller=caller, limit=limit)
        return ok(requests=[r.to_dict() for r in rows])

    @app.route("/api/leave-requests/assigned", methods=["GET"], endpoint="assigned_leave_requests")
    def assigned_leave_requests():
        caller = current_caller(container.directory)
        limit = optional_int(request.args.get("limit"), "limit") or DEFAULT_LIST_LIMIT
        rows = container.leave_service.list_assigned(
            caller=caller,
            status=request.args.get("status") or None,
            limit=limit,
        )
        return ok(requests=[r.to_dict() for r in rows])
