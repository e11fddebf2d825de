from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from functools import wraps
from typing import Any, Mapping

from flask import Flask, jsonify, request, session

from ..core.enums import RejectionReason
from ..core.exceptions import AuthenticationError, AuthorizationError, DomainError, ValidationError
from ..core.result import Result
from .datetime_utils import as_date, format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

STATUS_BY_REASON = {
    RejectionReason.UNAUTHORIZED: 403,
    RejectionReason.DUPLICATE: 409,
    RejectionReason.NO_OPEN_SESSION: 409,
    RejectionReason.NOT_FOUND: 404,
    RejectionReason.IO_FAILURE: 500,
    RejectionReason.INVALID: 400,
}


def to_json(value: Any) -> Any:
    """Dataclasses, enums and datetimes into plain JSON values."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_json(v) for v in value]
    return value


def ok(data: Any = None, status: int = 200):
    return jsonify({"success": True, "data": to_json(data)}), status


def fail(reason: RejectionReason, message: str, status: int | None = None):
    return jsonify({"success": False, "reason": reason.value, "message": message}), status or STATUS_BY_REASON[reason]


def result_response(result: Result, status: int = 200):
    if result.ok:
        return ok(result.value, status)
    return fail(result.rejection.reason, result.rejection.message)


def json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def parse_day(value: str) -> date:
    try:
        return as_date(value)
    except ValueError:
        raise ValidationError("Invalid date (YYYY-MM-DD)")


def parse_datetime_arg(value: str | None, field_name: str) -> datetime:
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValidationError(f"{field_name} must be an ISO-8601 timestamp")
    return parsed


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get("is_admin"):
            raise AuthorizationError("Admin login required")
        return view(*args, **kwargs)

    return wrapper


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        if isinstance(e, (AuthenticationError, AuthorizationError)):
            return fail(e.reason, str(e), 401)
        if e.reason == RejectionReason.IO_FAILURE:
            logger.error("Request failed on storage: %s", e)
        return fail(e.reason, str(e))
