"""Prometheus metrics for the compliance workflow.

Exposed on /metrics by the observability router.
"""

from prometheus_client import Counter, Histogram

# Workflow operations
workflow_operations_total = Counter(
    "qcompliance_workflow_operations_total",
    "Workflow operations by outcome",
    ["operation", "outcome"]  # outcome: success|forbidden|validation_error|invalid_transition|not_found|infrastructure_error
)

workflow_duration_seconds = Histogram(
    "qcompliance_workflow_duration_seconds",
    "Time spent executing a workflow operation in seconds",
    ["operation"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

# Audit trail
audit_records_total = Counter(
    "qcompliance_audit_records_total",
    "Audit records appended",
    ["category", "outcome"]
)

audit_sink_failures_total = Counter(
    "qcompliance_audit_sink_failures_total",
    "Audit records that could not be appended to the sink"
)

notification_failures_total = Counter(
    "qcompliance_notification_failures_total",
    "Refresh notifications that raised an error",
    ["kind"]
)
