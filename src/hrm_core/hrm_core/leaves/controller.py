from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_actor, error_response, json_body, login_required, roles_required
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..container import Container
from ..directory.enrichment import enrich_one


def register(app: Flask, container: Container) -> None:
    approvers = roles_required(Role.ADMIN, Role.HR)

    def _enriched(leave) -> dict:
        return enrich_one(leave.to_dict(), container.directory, auth_header=request.headers.get("Authorization"))

    @app.route("/api/leaves", methods=["POST"], endpoint="leave_create")
    @login_required
    def leave_create():
        actor = current_actor()
        try:
            leave = container.leave_service.create(
                json_body(),
                actor_id=actor.user_id,
                actor_role=actor.role,
                actor_employee_id=actor.employee_id,
            )
        except Exception as e:
            return error_response(e)
        return (
            jsonify({"success": True, "days": leave.days, "status": leave.status.value, "data": leave.to_dict()}),
            201,
        )

    @app.route("/api/leaves/<int:leave_id>", methods=["GET"], endpoint="leave_detail")
    @login_required
    def leave_detail(leave_id: int):
        actor = current_actor()
        try:
            leave = container.leave_service.get(leave_id)
            if actor.role == Role.EMPLOYEE and leave.employee_id != str(actor.employee_id):
                raise AuthorizationError("Access denied")
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": _enriched(leave)})

    @app.route("/api/leaves/<int:leave_id>", methods=["PUT"], endpoint="leave_update")
    @login_required
    def leave_update(leave_id: int):
        actor = current_actor()
        try:
            leave = container.leave_service.update(
                leave_id,
                json_body(),
                actor_id=actor.user_id,
                actor_role=actor.role,
                actor_employee_id=actor.employee_id,
            )
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": _enriched(leave)})

    @app.route("/api/leaves/<int:leave_id>/approve", methods=["POST"], endpoint="leave_approve")
    @approvers
    def leave_approve(leave_id: int):
        actor = current_actor()
        try:
            leave = container.leave_service.approve(
                leave_id,
                actor_id=actor.user_id,
                actor_role=actor.role,
                comments=json_body().get("comments"),
            )
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": _enriched(leave)})

    @app.route("/api/leaves/<int:leave_id>/reject", methods=["POST"], endpoint="leave_reject")
    @approvers
    def leave_reject(leave_id: int):
        actor = current_actor()
        try:
            leave = container.leave_service.reject(
                leave_id,
                actor_id=actor.user_id,
                actor_role=actor.role,
                comments=json_body().get("comments"),
            )
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": _enriched(leave)})
