from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..common.web import json_body, session_user_id, to_json
from ..container import Container
from ..core.exceptions import ValidationError
from .model import LeaveRequest, NewLeave


def _leave_json(leave: LeaveRequest) -> dict:
    data = to_json(leave)
    data["agentApproved"] = leave.agent_approved
    return data


def register(app: Flask, container: Container) -> None:
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"error": "Login required"}), 401
            return view(*args, **kwargs)

        return wrapper

    def _principal():
        return container.identity_service.resolve(session_user_id())

    def _approve_flag(data: dict) -> bool:
        action = str(data.get("action") or "").lower()
        if action not in {"approve", "reject"}:
            raise ValidationError("action must be approve or reject")
        return action == "approve"

    @app.route("/api/leaves", methods=["POST"], endpoint="api_leave_create")
    @login_required
    def api_leave_create():
        data = json_body()
        new = NewLeave(
            agent_id=data.get("agentId"),
            leave_type=str(data.get("leaveType") or "").upper(),
            reason=data.get("reason") or "",
            start_date=parse_iso_date(data.get("startDate") or ""),
            end_date=parse_iso_date(data.get("endDate") or ""),
            start_time=parse_hhmm(data.get("startTime") or "", "startTime"),
            end_time=parse_hhmm(data.get("endTime") or "", "endTime"),
        )
        leave = container.leave_service.create_leave(_principal(), new)
        return jsonify({"leave": _leave_json(leave)}), 201

    @app.route("/api/leaves", methods=["GET"], endpoint="api_leave_list")
    @login_required
    def api_leave_list():
        principal = _principal()
        scope = request.args.get("scope", "mine")
        if scope == "mine":
            items = container.leave_service.list_mine(principal)
        elif scope == "agent":
            items = container.leave_service.list_agent_pending(principal)
        elif scope == "admin":
            items = container.leave_service.list_admin_pending(principal)
        else:
            raise ValidationError("scope must be mine, agent or admin")
        return jsonify({"leaves": [_leave_json(x) for x in items]})

    @app.route("/api/leaves/<int:request_id>", methods=["GET"], endpoint="api_leave_get")
    @login_required
    def api_leave_get(request_id: int):
        leave = container.leave_service.get_leave(_principal(), request_id)
        return jsonify({"leave": _leave_json(leave)})

    @app.route("/api/leaves/<int:request_id>/agent", methods=["PUT"], endpoint="api_leave_agent")
    @login_required
    def api_leave_agent(request_id: int):
        approve = _approve_flag(json_body())
        leave = container.leave_service.agent_decide(_principal(), request_id, approve=approve)
        return jsonify({"leave": _leave_json(leave)})

    @app.route("/api/leaves/<int:request_id>/admin", methods=["PUT"], endpoint="api_leave_admin")
    @login_required
    def api_leave_admin(request_id: int):
        approve = _approve_flag(json_body())
        leave = container.leave_service.admin_decide(_principal(), request_id, approve=approve)
        return jsonify({"leave": _leave_json(leave)})
