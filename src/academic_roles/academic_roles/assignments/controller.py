from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import as_bool, json_body, json_endpoint, to_json
from ..core.enums import EntityKind
from ..container import Container

_NO_STORE = {"Cache-Control": "no-store"}


def register(app: Flask, container: Container) -> None:
    def _current(kind: EntityKind, id_param: str):
        view = container.current_holder_resolver.current_holder_view(kind, request.args.get(id_param))
        return jsonify({"success": True, "row": to_json(view)}), 200, _NO_STORE

    def _history(kind: EntityKind, id_param: str):
        rows = container.history_reader.history_view(kind, request.args.get(id_param))
        return jsonify({"success": True, "rows": to_json(rows)}), 200, _NO_STORE

    @app.route("/api/staff/departments/assign-head", methods=["POST"], endpoint="assign_department_head")
    @json_endpoint
    def assign_department_head():
        body = json_body()
        receipt = container.assignment_service.assign_department_head(
            body.get("department_id"),
            body.get("staff_id"),
            effective_date=parse_optional_date(body.get("start_date")),
            make_coordinator=as_bool(body.get("make_coordinator")),
        )
        return jsonify({"success": True, "row": to_json(receipt)})

    @app.route("/api/departments/current-head", methods=["GET"], endpoint="department_current_head")
    @json_endpoint
    def department_current_head():
        return _current(EntityKind.DEPARTMENT, "department_id")

    @app.route("/api/departments/head-history", methods=["GET"], endpoint="department_head_history")
    @json_endpoint
    def department_head_history():
        return _history(EntityKind.DEPARTMENT, "department_id")

    @app.route("/api/programs/assign-coordinator", methods=["POST"], endpoint="assign_program_coordinator")
    @json_endpoint
    def assign_program_coordinator():
        body = json_body()
        receipt = container.assignment_service.assign_program_coordinator(
            body.get("program_id"),
            body.get("staff_id"),
            effective_date=parse_optional_date(body.get("start_date")),
        )
        return jsonify({"success": True, "row": to_json(receipt)})

    @app.route("/api/programs/current-coordinator", methods=["GET"], endpoint="program_current_coordinator")
    @json_endpoint
    def program_current_coordinator():
        return _current(EntityKind.PROGRAM, "program_id")

    @app.route("/api/programs/coordinator-history", methods=["GET"], endpoint="program_coordinator_history")
    @app.route("/api/programs/roles", methods=["GET"], endpoint="program_roles")
    @json_endpoint
    def program_coordinator_history():
        return _history(EntityKind.PROGRAM, "program_id")
