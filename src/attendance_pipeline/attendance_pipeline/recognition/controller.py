from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import as_int, current_caller, json_body, ok, require_field
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sessions/<int:session_id>/recognitions", methods=["POST"], endpoint="process_recognition")
    def process_recognition(session_id: int):
        caller = current_caller(container.directory)
        data = json_body()
        outcome = container.recognition_service.process_attempt(
            session_id=session_id,
            student_id=as_int(require_field(data, "student_id"), "student_id"),
            image_ref=str(require_field(data, "image_ref")),
            confidence=require_field(data, "confidence"),
            liveness=require_field(data, "liveness"),
            quality=data.get("quality"),
            caller=caller,
        )
        # A rejected attempt is a normal outcome, not an error.
        return jsonify(outcome.to_dict())

    @app.route("/api/sessions/<int:session_id>/recognitions", methods=["GET"], endpoint="list_recognitions")
    def list_recognitions(session_id: int):
        caller = current_caller(container.directory)
        include_failures = request.args.get("include_failures", "0").lower() in {"1", "true", "yes"}
        attempts = container.recognition_service.list_attempts(
            session_id=session_id, caller=caller, include_failures=include_failures
        )
        return ok(attempts=[a.to_dict() for a in attempts])
