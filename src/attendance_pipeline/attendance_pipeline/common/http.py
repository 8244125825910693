from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, jsonify, request

from ..core.exceptions import (
    DomainError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    UnauthenticatedError,
    ValidationError,
)
from ..directory.model import Caller
from ..directory.repository import ProfileDirectory
from .datetime_utils import parse_optional_date

logger = logging.getLogger(__name__)

PROFILE_HEADER = "X-Profile-Id"

# Most specific first: InvalidTransitionError is a ValidationError.
_STATUS_BY_ERROR = (
    (UnauthenticatedError, 401),
    (PermissionDeniedError, 403),
    (NotFoundError, 404),
    (InvalidTransitionError, 409),
    (ValidationError, 400),
)


def status_for(error: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 400


def current_caller(directory: ProfileDirectory) -> Caller:
    raw = (request.headers.get(PROFILE_HEADER) or "").strip()
    if not raw.isdigit():
        raise UnauthenticatedError("Missing or malformed caller identity")
    caller = directory.resolve_caller(int(raw))
    if not caller:
        raise UnauthenticatedError("Unknown caller")
    return caller


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return {}
    return data


def require_field(data: dict, name: str) -> Any:
    value = data.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{name} is required")
    return value


def as_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")


def optional_int(value: Any, name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return as_int(value, name)


def optional_date_arg(name: str):
    try:
        return parse_optional_date(request.args.get(name))
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD")


def ok(status: int = 200, **data):
    return jsonify({"success": True, **data}), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        status = status_for(e)
        logger.info("%s %s -> %s: %s", request.method, request.path, status, e)
        return jsonify({"success": False, "message": str(e)}), status
