from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import as_bool, json_body, json_endpoint, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/staff/employments", methods=["POST"], endpoint="attach_employment")
    @json_endpoint
    def attach_employment():
        body = json_body()
        employment = container.employment_service.attach(
            body.get("staff_id"),
            body.get("department_id"),
            # "Attach department" flow: non-primary unless asked explicitly.
            is_primary=body.get("is_primary") is True,
            start_date=parse_optional_date(body.get("start_date")),
            position_title=body.get("position_title"),
        )
        return jsonify({"success": True, "row": to_json(employment)}), 201

    @app.route("/api/staff/employments", methods=["GET"], endpoint="list_employments")
    @json_endpoint
    def list_employments():
        rows = container.employment_service.list_employments(
            request.args.get("staff_id"),
            include_closed=as_bool(request.args.get("include_closed")),
        )
        return jsonify({"success": True, "rows": to_json(list(rows))})

    @app.route("/api/staff/employments/<employment_id>/primary", methods=["POST"], endpoint="set_primary_employment")
    @json_endpoint
    def set_primary_employment(employment_id: str):
        body = json_body()
        employment = container.employment_service.set_primary(body.get("staff_id"), employment_id)
        return jsonify({"success": True, "row": to_json(employment)})

    @app.route("/api/staff/employments/<employment_id>/end", methods=["POST"], endpoint="end_employment")
    @json_endpoint
    def end_employment(employment_id: str):
        body = request.get_json(silent=True) or {}
        employment = container.employment_service.end_employment(
            employment_id,
            end_date=parse_optional_date(body.get("end_date")),
        )
        return jsonify({"success": True, "row": to_json(employment)})
