"""Audit logging for drift check runs."""

from .audit import (
    AUDIT_FILE_NAME,
    AuditEvent,
    JsonlAuditLogger,
    new_run_id,
    sanitize_arguments,
    utc_timestamp,
)

__all__ = [
    "AUDIT_FILE_NAME",
    "AuditEvent",
    "JsonlAuditLogger",
    "new_run_id",
    "sanitize_arguments",
    "utc_timestamp",
]
