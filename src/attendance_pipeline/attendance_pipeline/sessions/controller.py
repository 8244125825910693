from __future__ import annotations

from flask import Flask

from ..common.http import as_int, current_caller, json_body, ok, require_field
from ..container import Container
from ..recognition.gate import RecognitionThresholds


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sessions", methods=["POST"], endpoint="create_session")
    def create_session():
        caller = current_caller(container.directory)
        data = json_body()
        thresholds = data.get("thresholds")
        session_id = container.session_service.create_session(
            caller=caller,
            subject_id=as_int(require_field(data, "subject_id"), "subject_id"),
            label=str(require_field(data, "label")),
            mode=data.get("mode") or "manual",
            location=data.get("location"),
            thresholds=RecognitionThresholds.from_dict(thresholds) if thresholds else None,
        )
        return ok(201, session_id=session_id)

    @app.route("/api/sessions/<int:session_id>/end", methods=["POST"], endpoint="end_session")
    def end_session(session_id: int):
        caller = current_caller(container.directory)
        container.session_service.end_session(session_id=session_id, caller=caller)
        return ok(session_id=session_id)

    @app.route("/api/sessions/active", methods=["GET"], endpoint="active_sessions")
    def active_sessions():
        caller = current_caller(container.directory)
        sessions = container.session_service.list_active(caller=caller)
        return ok(sessions=[s.to_dict() for s in sessions])
