"""Pydantic schemas for audit log endpoints.

Audit records are read-only through the API (no create/update/delete).
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from domain.audit.models import AuditRecord


class AuditLogResponse(BaseModel):
    """Response schema for audit log entries. All fields are read-only."""
    id: str = Field(..., description="Audit record identifier")
    timestamp: datetime = Field(..., description="When the action happened")
    actor_id: str = Field(..., description="User who performed the action")
    actor_role: str = Field(..., description="CLIENT, QUALITY or ADMIN")
    actor_name: Optional[str] = None
    action: str = Field(..., description="Action tag (FILE_INSPECT_REJECT, TICKET_ESCALATED, ...)")
    category: str = Field(..., description="DATA, AUTH or SYSTEM")
    severity: str = Field(..., description="INFO, WARNING or CRITICAL")
    outcome: str = Field(..., description="SUCCESS or FAILURE")
    target: Optional[str] = Field(None, description="Affected entity as <kind>:<id>")
    context: dict[str, Any] = Field(default_factory=dict)
    request_id: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "timestamp": "2025-01-04T12:00:00Z",
                "actor_id": "u-quality-1",
                "actor_role": "QUALITY",
                "actor_name": "Ines Kraft",
                "action": "FILE_INSPECT_REJECT",
                "category": "DATA",
                "severity": "WARNING",
                "outcome": "SUCCESS",
                "target": "document:doc-1",
                "context": {"old_status": "PENDING", "new_status": "REJECTED", "rejection_reason": "Sulfur above limit"},
                "request_id": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
            }
        }

    @classmethod
    def from_record(cls, record: AuditRecord) -> "AuditLogResponse":
        data = record.to_dict()
        return cls(**data)


class AuditLogListResponse(BaseModel):
    """Response schema for audit log queries, with pagination metadata."""
    entries: list[AuditLogResponse] = Field(..., description="List of audit log entries")
    total: int = Field(..., description="Total number of entries matching filters")
    page: int = Field(..., description="Current page number")
    per_page: int = Field(..., description="Entries per page")
