"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_UTC_OFFSET = "+08:00"
CIVIL_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

# Same-task sessions closer than this are merged by the work-log merge.
MERGE_GAP_MINUTES = 1

DEFAULT_LIST_LIMIT = 200

NOTIFY_TEMPLATE_LEAVE_REQUEST = "leave-request"
NOTIFY_TEMPLATE_LEAVE_PENDING_ADMIN = "leave-pending-admin"
NOTIFY_TEMPLATE_LEAVE_RESULT = "leave-result"
