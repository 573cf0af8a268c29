"""Observability module: structured logging, request correlation, metrics, health."""

from .logging_config import configure_logging, get_logger
from .metrics import (
    audit_records_total,
    audit_sink_failures_total,
    notification_failures_total,
    workflow_duration_seconds,
    workflow_operations_total,
)
from .request_id import (
    current_request_id,
    generate_request_id,
    get_request_id,
    request_id_scope,
    request_id_var,
    set_request_id,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "audit_records_total",
    "audit_sink_failures_total",
    "notification_failures_total",
    "workflow_duration_seconds",
    "workflow_operations_total",
    # Request ID
    "current_request_id",
    "generate_request_id",
    "get_request_id",
    "request_id_scope",
    "request_id_var",
    "set_request_id",
]
