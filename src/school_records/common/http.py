"""JSON envelope shared by every API route.

Success: ``{"success": true, "message": ..., "data": ...}``
Failure: ``{"success": false, "message": ...}``
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

import structlog
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


def to_jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, Decimal):
        return float(value)
    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def ok(data: Any = None, message: Optional[str] = None, status: int = 200):
    return jsonify({"success": True, "message": message, "data": to_jsonable(data)}), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def json_list() -> list:
    data = request.get_json(silent=True)
    if not isinstance(data, list):
        raise ValidationError("Request body must be a JSON array")
    for item in data:
        if not isinstance(item, dict):
            raise ValidationError("Each item must be a JSON object")
    return data


def register_error_handlers(app: Flask) -> None:
    status_by_error = (
        (ConflictError, 409),
        (ValidationError, 400),
        (NotFoundError, 404),
        (AuthenticationError, 401),
        (AuthorizationError, 403),
    )

    for error_cls, status in status_by_error:
        app.register_error_handler(error_cls, lambda e, status=status: fail(str(e), status))

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return fail(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("request.failed", method=request.method, path=request.path)
        if app.config.get("DEBUG"):
            return fail(f"Internal error: {e}", 500)
        return fail("Internal server error", 500)
