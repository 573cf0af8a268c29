"""Workflow orchestration: binds actor, target and operation into one audited unit"""

from .results import WorkflowOperation, WorkflowResult

__all__ = ["WorkflowOperation", "WorkflowResult"]
