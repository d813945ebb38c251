from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.validators import require_id
from ..common.web import client_metadata, json_body, session_user_id, to_json
from ..container import Container
from ..users.permissions import Action, Resource, require
from .model import OvertimeStart


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

    @app.route("/api/overtime", methods=["GET"], endpoint="api_overtime_open")
    @login_required
    def api_overtime_open():
        principal = _principal()
        worker_id = require_id(request.args.get("userId") or principal.user_id, "userId")
        require(principal, Action.VIEW_ATTENDANCE, Resource(owner_id=worker_id))
        return jsonify({"open": to_json(container.overtime_tracker.find_open(worker_id))})

    @app.route("/api/overtime/start", methods=["POST"], endpoint="api_overtime_start")
    @login_required
    def api_overtime_start():
        principal = _principal()
        data = json_body()
        result = container.overtime_tracker.start_session(
            principal,
            data.get("userId") or principal.user_id,
            OvertimeStart(reason=data.get("reason") or "", metadata=client_metadata(data)),
        )
        return jsonify({"session": to_json(result.started), "autoClosed": to_json(list(result.auto_closed))}), 201

    @app.route("/api/overtime/end", methods=["POST"], endpoint="api_overtime_end")
    @login_required
    def api_overtime_end():
        principal = _principal()
        data = json_body()
        stopped = container.overtime_tracker.stop_open(
            principal,
            data.get("userId") or principal.user_id,
            metadata=client_metadata(data),
        )
        return jsonify({"session": to_json(stopped)})
