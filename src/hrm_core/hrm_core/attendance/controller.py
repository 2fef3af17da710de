from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_actor, error_response, json_body, login_required, roles_required
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _own_employee_id() -> str:
        actor = current_actor()
        if not actor.employee_id:
            raise ValidationError("Employee ID not found. Please link your account to an employee.")
        return str(actor.employee_id)

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def attendance_check_in():
        try:
            record = container.attendance_service.check_in(
                _own_employee_id(),
                location=json_body().get("location"),
            )
        except Exception as e:
            return error_response(e)

        return (
            jsonify(
                {
                    "success": True,
                    "status": record.status.value,
                    "check_in": record.check_in.isoformat(),
                    "data": record.to_dict(),
                }
            ),
            201,
        )

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def attendance_check_out():
        try:
            record = container.attendance_service.check_out(
                _own_employee_id(),
                location=json_body().get("location"),
            )
        except Exception as e:
            return error_response(e)

        return jsonify(
            {
                "success": True,
                "work_hours": float(record.work_hours),
                "overtime_hours": float(record.overtime_hours),
                "status": record.status.value,
                "data": record.to_dict(),
            }
        )

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def attendance_today():
        try:
            status = container.attendance_service.today_status(_own_employee_id())
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, **status.to_dict()})

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @login_required
    def attendance_stats():
        actor = current_actor()
        try:
            if actor.role == Role.EMPLOYEE:
                employee_id = _own_employee_id()
            else:
                employee_id = request.args.get("employee") or _own_employee_id()
            stats = container.attendance_service.stats(
                employee_id,
                start_date=request.args.get("start_date"),
                end_date=request.args.get("end_date"),
            )
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": stats.to_dict()})

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_backfill")
    @roles_required(Role.ADMIN, Role.HR)
    def attendance_backfill():
        actor = current_actor()
        try:
            record = container.attendance_service.backfill_create(current_role=actor.role, payload=json_body())
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": record.to_dict()}), 201

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @login_required
    def attendance_update(attendance_id: int):
        actor = current_actor()
        try:
            record = container.attendance_service.update_record(
                current_role=actor.role,
                current_employee_id=actor.employee_id,
                attendance_id=attendance_id,
                payload=json_body(),
            )
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": record.to_dict()})
