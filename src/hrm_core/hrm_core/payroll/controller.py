from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_actor, error_response, json_body, login_required, roles_required
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..container import Container
from ..directory.enrichment import enrich_one, enrich_records


def register(app: Flask, container: Container) -> None:
    payroll_staff = roles_required(Role.ADMIN, Role.HR)

    def _enriched(record) -> dict:
        return enrich_one(record.to_dict(), container.directory, auth_header=request.headers.get("Authorization"))

    @app.route("/api/salaries", methods=["POST"], endpoint="salary_create")
    @payroll_staff
    def salary_create():
        actor = current_actor()
        try:
            record = container.compensation_service.create(json_body(), actor_id=actor.user_id, actor_role=actor.role)
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": _enriched(record)}), 201

    @app.route("/api/salaries/<int:record_id>", methods=["GET"], endpoint="salary_detail")
    @login_required
    def salary_detail(record_id: int):
        actor = current_actor()
        try:
            record = container.compensation_service.get(record_id)
            if actor.role == Role.EMPLOYEE and record.employee_id != str(actor.employee_id):
                raise AuthorizationError("Access denied")
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": _enriched(record)})

    @app.route("/api/salaries/<int:record_id>", methods=["PUT"], endpoint="salary_update")
    @payroll_staff
    def salary_update(record_id: int):
        actor = current_actor()
        try:
            record = container.compensation_service.update(
                record_id,
                json_body(),
                actor_id=actor.user_id,
                actor_role=actor.role,
            )
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": _enriched(record)})

    @app.route("/api/salaries/process-payroll", methods=["POST"], endpoint="salary_process_payroll")
    @payroll_staff
    def salary_process_payroll():
        actor = current_actor()
        body = json_body()
        try:
            result = container.payroll_batch_runner.run(
                body.get("month"),
                body.get("year"),
                actor_id=actor.user_id,
                actor_role=actor.role,
            )
        except Exception as e:
            return error_response(e)

        data = result.to_dict()
        data["records"] = enrich_records(
            data["records"], container.directory, auth_header=request.headers.get("Authorization")
        )
        return jsonify(
            {
                "success": True,
                "message": f"Payroll processed for {result.created_count} employees",
                **data,
            }
        )
