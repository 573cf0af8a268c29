"""Audit log query endpoints.

All endpoints in this router are read-only. ADMIN users see every category;
the quality team sees DATA records (document and ticket history) only.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from auth.dependencies import require_role
from auth.roles import UserRole
from config import Settings, get_settings
from dependencies import get_audit_sink
from domain.actors import Actor
from domain.audit.models import AuditAction, AuditCategory, AuditOutcome, AuditSeverity
from domain.errors import ForbiddenError
from infrastructure.repositories.audit_repository import AuditQuery, SqlAuditSink
from .schemas import AuditLogListResponse, AuditLogResponse

router = APIRouter(prefix="/audit", tags=["Audit Logs"])

QUALITY_CATEGORIES = frozenset({AuditCategory.DATA})


@router.get(
    "",
    response_model=AuditLogListResponse,
    summary="Query audit logs (ADMIN, QUALITY)",
)
def query_audit_logs(
    actor: Actor = Depends(require_role(UserRole.ADMIN, UserRole.QUALITY)),
    sink: SqlAuditSink = Depends(get_audit_sink),
    settings: Settings = Depends(get_settings),
    action: Optional[AuditAction] = Query(None, description="Filter by action tag"),
    category: Optional[AuditCategory] = Query(None, description="Filter by category"),
    severity: Optional[AuditSeverity] = Query(None),
    outcome: Optional[AuditOutcome] = Query(None),
    actor_id: Optional[str] = Query(None, description="Filter by acting user"),
    target: Optional[str] = Query(None, description="Filter by target, e.g. document:doc-1"),
    start_date: Optional[datetime] = Query(None, description="Minimum timestamp (ISO 8601)"),
    end_date: Optional[datetime] = Query(None, description="Maximum timestamp (ISO 8601)"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    per_page: int = Query(50, ge=1, description="Entries per page"),
) -> AuditLogListResponse:
    """Query the audit trail, newest first.

    Example:
        GET /audit?target=document:doc-1&outcome=SUCCESS
    """
    if actor.role == UserRole.ADMIN:
        categories = frozenset({category}) if category else None
    else:
        if category is not None and category not in QUALITY_CATEGORIES:
            raise ForbiddenError(f"{actor.role.value} users cannot read {category.value} audit records")
        categories = QUALITY_CATEGORIES

    per_page = min(per_page, settings.AUDIT_QUERY_MAX_PAGE_SIZE)
    records, total = sink.query(AuditQuery(
        categories=categories,
        action=action,
        severity=severity,
        outcome=outcome,
        actor_id=actor_id,
        target=target,
        start_date=start_date,
        end_date=end_date,
        page=page,
        per_page=per_page,
    ))

    return AuditLogListResponse(
        entries=[AuditLogResponse.from_record(r) for r in records],
        total=total,
        page=page,
        per_page=per_page,
    )
