from __future__ import annotations

import logging
from datetime import datetime
from functools import wraps
from typing import Any, Optional

from flask import Flask, current_app, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.constants import DEFAULT_DEVICE_ID_HEADER
from ..core.enums import DenyReason, ErrorKind
from ..core.exceptions import AuthorizationError, StorageError, ValidationError
from ..core.results import Deny, Err

logger = logging.getLogger(__name__)

_ERROR_STATUS = {
    ErrorKind.DUPLICATE_PENDING: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ALREADY_REVIEWED: 409,
    ErrorKind.FORBIDDEN: 403,
}


def json_ok(data: Any = None, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def json_error(error: str, message: str, status: int):
    return jsonify({"success": False, "error": error, "message": message}), status


def err_response(result: Err):
    return json_error(result.kind.value, result.message, _ERROR_STATUS.get(result.kind, 400))


_DENY_MESSAGES = {
    DenyReason.NETWORK_NOT_ALLOWED: "You are not on an allowed network.",
    DenyReason.NO_DEVICE_REGISTERED: "No device is registered for your account. Request a device change.",
    DenyReason.DEVICE_MISMATCH: "This device is not recognized. Request a device change.",
}


def deny_response(decision: Deny):
    return json_error(decision.reason.value, _DENY_MESSAGES.get(decision.reason, "Punch denied"), 403)


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def client_address() -> Optional[str]:
    """Peer address as seen by WSGI. Behind a trusted proxy ProxyFix has already rewritten it."""
    return request.remote_addr


def presented_device_id() -> Optional[str]:
    header = current_app.config.get("DEVICE_ID_HEADER", DEFAULT_DEVICE_ID_HEADER)
    value = request.headers.get(header)
    return value.strip() if value and value.strip() else None


def login_required(identities):
    """Require the session keys set by the host application's login and load the Identity into ``g``."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session or "role" not in session:
                return json_error("unauthenticated", "Please log in to continue", 401)
            identity = identities.get_by_id(int(session["user_id"]))
            if identity is None:
                return json_error("unauthenticated", "Account not found", 401)
            g.identity = identity
            return view(*args, **kwargs)

        return wrapper

    return decorator


def admin_required(identities):
    def decorator(view):
        @wraps(view)
        @login_required(identities)
        def wrapper(*args, **kwargs):
            if not g.identity.is_admin:
                return json_error("forbidden", "Forbidden", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return json_error("validation_error", str(e), 422)

    @app.errorhandler(AuthorizationError)
    def _authorization(e: AuthorizationError):
        return json_error("forbidden", str(e), 403)

    @app.errorhandler(StorageError)
    def _storage(e: StorageError):
        logger.error("Storage failure on %s %s: %s", request.method, request.path, e)
        return json_error("storage_unavailable", "Service temporarily unavailable", 503)

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return json_error(e.name.lower().replace(" ", "_"), e.description or e.name, e.code or 500)
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return json_error("internal_error", "Internal server error", 500)
