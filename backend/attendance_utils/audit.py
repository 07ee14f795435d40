import logging
import os
from datetime import datetime, timezone
from flask import current_app, has_app_context

AUDIT_LOG_FILE = os.path.join("logs", "audit.log")

logger = logging.getLogger("attendance.audit")


def _audit_log_file():
    if has_app_context():
        return current_app.config.get("AUDIT_LOG_FILE", AUDIT_LOG_FILE)
    return AUDIT_LOG_FILE


def log_event(event_type, ip=None, description=None, level="INFO"):
    """
    Append one line to the audit trail and mirror it to the ``attendance.audit`` logger.

    ``event_type`` is an upper-case tag such as ATTENDANCE_RECORDED or
    CLASSROOM_DELETED; ``level`` is a standard logging level name.
    """
    path = _audit_log_file()
    if os.path.dirname(path):
        os.makedirs(os.path.dirname(path), exist_ok=True)

    timestamp = datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')
    line = f"[{timestamp}] [{level.upper()}] EVENT: {event_type} | IP: {ip or 'N/A'} | DESC: {description or 'N/A'}"

    with open(path, "a") as audit_file:
        audit_file.write(line + "\n")

    logger.log(logging.getLevelName(level.upper()), "%s %s", event_type, description or "")
