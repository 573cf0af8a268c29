"""Audit domain module - immutable audit records and their enumerations"""

from .models import (
    AuditAction,
    AuditCategory,
    AuditOutcome,
    AuditRecord,
    AuditSeverity,
    target_ref,
)

__all__ = [
    "AuditAction",
    "AuditCategory",
    "AuditOutcome",
    "AuditRecord",
    "AuditSeverity",
    "target_ref",
]
