from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..clock.model import ClockMetadata
from ..core.exceptions import DomainError, ValidationError
from .datetime_utils import parse_instant

logger = logging.getLogger(__name__)


def to_json(value: Any) -> Any:
    """Convert domain dataclasses into JSON-ready structures (camelCase keys)."""
    if is_dataclass(value) and not isinstance(value, type):
        return {_camel(f.name): to_json(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.capitalize() for p in rest)


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def optional_instant(data: Dict[str, Any], key: str) -> Optional[datetime]:
    value = data.get(key)
    if value in (None, ""):
        return None
    return parse_instant(str(value), key)


def session_user_id() -> Optional[int]:
    uid = session.get("user_id")
    return int(uid) if uid is not None else None


def client_ip() -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For", "")
    ip = (
        forwarded.split(",")[0].strip()
        or request.headers.get("CF-Connecting-IP", "").strip()
        or request.headers.get("X-Real-IP", "").strip()
        or request.remote_addr
    )
    if ip and ip.startswith("::ffff:"):
        ip = ip[len("::ffff:"):]
    return ip or None


def client_metadata(data: Optional[Dict[str, Any]] = None) -> ClockMetadata:
    data = data or {}
    return ClockMetadata(
        ip_address=client_ip(),
        device_fingerprint=data.get("deviceFingerprint") or None,
        user_agent=request.headers.get("User-Agent") or None,
    )


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        if e.http_status >= 500:
            logger.error("request %s %s failed: %s", request.method, request.path, e)
        return jsonify({"error": str(e)}), e.http_status

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify({"error": e.description}), e.code
        logger.exception("unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500
