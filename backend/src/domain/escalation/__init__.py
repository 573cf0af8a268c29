"""Escalation domain module - who may escalate to whom, with which evidence"""

from .policy import EscalationDecision, EscalationPolicy, default_policy

__all__ = ["EscalationDecision", "EscalationPolicy", "default_policy"]
