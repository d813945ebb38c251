from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_instant
from ..common.validators import require_id
from ..common.web import client_metadata, json_body, session_user_id, to_json
from ..container import Container
from ..users.permissions import Action, Resource, require


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

    @app.route("/api/clock", methods=["POST"], endpoint="api_clock_record")
    @login_required
    def api_clock_record():
        principal = _principal()
        data = json_body()
        event = container.clock_ledger.record_event(
            principal,
            data.get("userId") or principal.user_id,
            str(data.get("type") or "").upper(),
            client_metadata(data),
        )
        return jsonify({"event": to_json(event)}), 201

    @app.route("/api/clock", methods=["GET"], endpoint="api_clock_list")
    @login_required
    def api_clock_list():
        principal = _principal()
        worker_id = require_id(request.args.get("userId") or principal.user_id, "userId")
        require(principal, Action.VIEW_ATTENDANCE, Resource(owner_id=worker_id))
        events = container.clock_ledger.list_day(worker_id, request.args.get("date", ""))
        status = container.clock_ledger.current_status(worker_id)
        return jsonify({"events": to_json(list(events)), "clockedIn": status.clocked_in})

    @app.route("/api/clock/<int:event_id>", methods=["PUT"], endpoint="api_clock_edit")
    @login_required
    def api_clock_edit(event_id: int):
        data = json_body()
        event = container.clock_ledger.edit_event(
            _principal(),
            event_id,
            parse_instant(str(data.get("timestamp") or ""), "timestamp"),
            data.get("editReason") or "",
        )
        return jsonify({"event": to_json(event)})

    @app.route("/api/clock/<int:event_id>", methods=["DELETE"], endpoint="api_clock_delete")
    @login_required
    def api_clock_delete(event_id: int):
        reason = json_body().get("editReason") or request.args.get("editReason", "")
        container.clock_ledger.delete_event(_principal(), event_id, reason)
        return jsonify({"deleted": event_id})
