from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.validators import require_id
from ..common.web import json_body, optional_instant, session_user_id, to_json
from ..container import Container
from ..core.exceptions import ValidationError
from ..users.permissions import Action, Resource, require
from .model import WorkDescriptor


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

    @app.route("/api/worklog", methods=["POST"], endpoint="api_worklog_start")
    @login_required
    def api_worklog_start():
        principal = _principal()
        data = json_body()
        descriptor = WorkDescriptor(
            project_code=data.get("projectCode") or "",
            project_name=data.get("projectName") or "",
            category=data.get("category") or "",
            content=data.get("content") or "",
            is_overtime=bool(data.get("isOvertime", False)),
        )
        worker_id = data.get("userId") or principal.user_id
        start_time = optional_instant(data, "startTime")
        end_time = optional_instant(data, "endTime")
        if end_time is not None:
            if start_time is None:
                raise ValidationError("startTime is required with endTime")
            entry = container.work_tracker.record_completed(principal, worker_id, descriptor, start_time, end_time)
            resolved = [{"sessionId": r.session.session_id, "action": r.action.value} for r in entry.resolved]
            return jsonify({"session": to_json(entry.created), "resolved": resolved}), 201

        result = container.work_tracker.start_session(principal, worker_id, descriptor, start_time)
        return jsonify({"session": to_json(result.started), "autoClosed": to_json(list(result.auto_closed))}), 201

    @app.route("/api/worklog", methods=["GET"], endpoint="api_worklog_list")
    @login_required
    def api_worklog_list():
        principal = _principal()
        worker_id = require_id(request.args.get("userId") or principal.user_id, "userId")
        require(principal, Action.VIEW_ATTENDANCE, Resource(owner_id=worker_id))

        sessions = container.work_tracker.list_day(worker_id, request.args.get("date", ""))
        open_session = container.work_tracker.find_open(worker_id)
        return jsonify({"sessions": to_json(list(sessions)), "open": to_json(open_session)})

    @app.route("/api/worklog/<int:session_id>", methods=["PUT"], endpoint="api_worklog_stop")
    @login_required
    def api_worklog_stop(session_id: int):
        data = json_body()
        stopped = container.work_tracker.stop_session(_principal(), session_id, optional_instant(data, "endTime"))
        return jsonify({"session": to_json(stopped)})

    @app.route(
        "/api/worklog/<int:session_id>/delete-preview",
        methods=["GET"],
        endpoint="api_worklog_delete_preview",
    )
    @login_required
    def api_worklog_delete_preview(session_id: int):
        preview = container.work_tracker.preview_delete(_principal(), session_id)
        return jsonify({"session": to_json(preview.session), "clockEventCount": preview.clock_event_count})

    @app.route("/api/worklog/<int:session_id>", methods=["DELETE"], endpoint="api_worklog_delete")
    @login_required
    def api_worklog_delete(session_id: int):
        removed = container.work_tracker.delete_session(_principal(), session_id)
        return jsonify({"deleted": session_id, "clockEventsDeleted": removed})

    @app.route("/api/worklog/merge", methods=["POST"], endpoint="api_worklog_merge")
    @login_required
    def api_worklog_merge():
        principal = _principal()
        data = json_body()
        results = container.work_tracker.merge_adjacent(
            principal, data.get("userId") or principal.user_id, str(data.get("date") or "")
        )
        return jsonify(
            {
                "merged": [
                    {"session": to_json(r.merged), "originalCount": r.original_count} for r in results
                ]
            }
        )

    @app.route("/api/worklog/merge/preview", methods=["POST"], endpoint="api_worklog_merge_preview")
    @login_required
    def api_worklog_merge_preview():
        principal = _principal()
        data = json_body()
        groups = container.work_tracker.preview_merges(
            principal, data.get("userId") or principal.user_id, str(data.get("date") or "")
        )
        return jsonify(
            {
                "groups": [
                    {
                        "sessions": to_json(group),
                        "startTime": to_json(group[0].start_time),
                        "endTime": to_json(max(s.end_time for s in group)),
                    }
                    for group in groups
                ]
            }
        )
