"""Quality documents domain module - certificate model, compliance lifecycle, permissions"""

from .models import (
    ChemicalComposition,
    ClientFeedback,
    DocumentTransition,
    Inspection,
    MechanicalProperties,
    QualityDocument,
    QualityStatus,
)
from .status import can_transition, get_allowed_transitions, validate_transition
from .machine import DocumentStateMachine
from .permissions import can_delete, can_view, visible_documents
from .stats import ComplianceOverview, compliance_overview

__all__ = [
    "ChemicalComposition",
    "ClientFeedback",
    "DocumentTransition",
    "Inspection",
    "MechanicalProperties",
    "QualityDocument",
    "QualityStatus",
    "can_transition",
    "get_allowed_transitions",
    "validate_transition",
    "DocumentStateMachine",
    "can_delete",
    "can_view",
    "visible_documents",
    "ComplianceOverview",
    "compliance_overview",
]
