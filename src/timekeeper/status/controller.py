from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.validators import require_id
from ..common.web import session_user_id, to_json
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

    @app.route("/api/punch-status", methods=["GET"], endpoint="api_punch_status")
    @login_required
    def api_punch_status():
        principal = container.identity_service.resolve(session_user_id())
        worker_id = require_id(request.args.get("userId") or principal.user_id, "userId")
        require(principal, Action.VIEW_ATTENDANCE, Resource(owner_id=worker_id))

        status = container.punch_status_service.punch_status(worker_id)
        return jsonify(
            {
                "date": status.day.civil_date,
                "isHoliday": status.day.is_holiday,
                "isWeekend": status.day.is_weekend,
                "holidayName": status.day.name,
                "clockedIn": status.clock.clocked_in,
                "lastIn": to_json(status.clock.last_in),
                "lastOut": to_json(status.clock.last_out),
                "openOvertime": to_json(status.open_overtime),
            }
        )
