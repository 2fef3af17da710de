from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_actor, error_response, json_body, login_required, roles_required
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..container import Container
from ..directory.enrichment import enrich_one


def register(app: Flask, container: Container) -> None:
    reviewers = roles_required(Role.ADMIN, Role.HR, Role.MANAGER)

    def _enriched(review) -> dict:
        return enrich_one(review.to_dict(), container.directory, auth_header=request.headers.get("Authorization"))

    @app.route("/api/kpi", methods=["POST"], endpoint="kpi_create")
    @reviewers
    def kpi_create():
        actor = current_actor()
        try:
            review = container.kpi_service.create(json_body(), actor_id=actor.user_id, actor_role=actor.role)
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": _enriched(review)}), 201

    @app.route("/api/kpi/<int:kpi_id>", methods=["GET"], endpoint="kpi_detail")
    @login_required
    def kpi_detail(kpi_id: int):
        actor = current_actor()
        try:
            review = container.kpi_service.get(kpi_id)
            if actor.role == Role.EMPLOYEE and review.employee_id != str(actor.employee_id):
                raise AuthorizationError("Access denied")
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": _enriched(review)})

    @app.route("/api/kpi/<int:kpi_id>", methods=["PUT"], endpoint="kpi_update")
    @reviewers
    def kpi_update(kpi_id: int):
        actor = current_actor()
        try:
            review = container.kpi_service.update(kpi_id, json_body(), actor_id=actor.user_id, actor_role=actor.role)
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": _enriched(review)})

    @app.route("/api/kpi/<int:kpi_id>/review", methods=["PUT"], endpoint="kpi_review")
    @reviewers
    def kpi_review(kpi_id: int):
        actor = current_actor()
        try:
            review = container.kpi_service.review(
                kpi_id,
                json_body(),
                reviewer_id=actor.user_id,
                actor_role=actor.role,
            )
        except Exception as e:
            return error_response(e)
        return jsonify({"success": True, "data": _enriched(review)})
