"""Shared helpers for the JSON controllers.

Identity is issued by the external auth service; we only read what it put in
the Flask session (user_id, employee_id, role).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DirectoryUnavailable,
    DomainError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: Role
    employee_id: Optional[str]


def current_actor() -> Actor:
    return Actor(
        user_id=str(session["user_id"]),
        role=Role(session.get("role", Role.EMPLOYEE.value)),
        employee_id=session.get("employee_id"),
    )


def roles_required(*roles: Role):
    """401 without a session, 403 when the role is not in `roles` (empty = any role)."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            if roles and session.get("role") not in {r.value for r in roles}:
                return jsonify({"success": False, "message": "Access denied"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


login_required = roles_required()


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return {}
    return data


def error_response(exc: Exception):
    if isinstance(exc, ValidationError):
        body = {"success": False, "message": str(exc)}
        if exc.field:
            body["field"] = exc.field
        return jsonify(body), 400
    if isinstance(exc, ConflictError):
        return jsonify({"success": False, "message": str(exc)}), 400
    if isinstance(exc, NotFoundError):
        return jsonify({"success": False, "message": str(exc)}), 404
    if isinstance(exc, AuthorizationError):
        return jsonify({"success": False, "message": str(exc)}), 403
    if isinstance(exc, DirectoryUnavailable):
        return jsonify({"success": False, "message": str(exc)}), 503
    if isinstance(exc, DomainError):
        return jsonify({"success": False, "message": str(exc)}), 400

    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"success": False, "message": "Internal server error"}), 500
