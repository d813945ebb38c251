from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from ..clock.model import ClockMetadata
from ..core.enums import OvertimeStatus
from ..database.mysql_base import from_db_instant, to_db_instant
from ..sessions.mysql_session_repository import MySQLSessionRepository
from .model import OvertimeDraft, OvertimeSession
from .repository import OvertimeRepository


class MySQLOvertimeRepository(MySQLSessionRepository, OvertimeRepository):
    table = "overtime_sessions"
    columns = """
        session_id, worker_id, start_time, end_time, reason, status,
        start_ip, start_device, start_user_agent, end_ip, end_device, end_user_agent
    """
    tracker = "OVERTIME"

    def row_to_session(self, r: Dict[str, Any]) -> OvertimeSession:
        end_metadata = None
        if r.get("end_time") is not None:
            end_metadata = ClockMetadata(
                ip_address=r.get("end_ip"),
                device_fingerprint=r.get("end_device"),
                user_agent=r.get("end_user_agent"),
            )
        return OvertimeSession(
            session_id=int(r["session_id"]),
            worker_id=int(r["worker_id"]),
            start_time=from_db_instant(r["start_time"]),
            end_time=from_db_instant(r.get("end_time")),
            reason=r["reason"],
            status=OvertimeStatus(r["status"]),
            start_metadata=ClockMetadata(
                ip_address=r.get("start_ip"),
                device_fingerprint=r.get("start_device"),
                user_agent=r.get("start_user_agent"),
            ),
            end_metadata=end_metadata,
        )

    def insert_draft(self, cur, draft: OvertimeDraft) -> int:
        cur.execute(
            """
            INSERT INTO overtime_sessions(
                worker_id, start_time, reason, status, start_ip, start_device, start_user_agent
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(draft.worker_id),
                to_db_instant(draft.start_time),
                draft.reason,
                draft.status.value,
                draft.start_metadata.ip_address,
                draft.start_metadata.device_fingerprint,
                draft.start_metadata.user_agent,
            ),
        )
        return int(cur.lastrowid)

    def close_columns(self, metadata: Optional[ClockMetadata]) -> Tuple[str, Tuple[Any, ...]]:
        if metadata is None:
            return "", ()
        return (
            ", end_ip=%s, end_device=%s, end_user_agent=%s",
            (metadata.ip_address, metadata.device_fingerprint, metadata.user_agent),
        )
