"""Certificate domain models.

These are domain models (not database models). Persistence adapters convert
them to and from rows; the state machine only ever works on these.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from domain.audit.models import AuditAction, AuditSeverity


class QualityStatus(str, Enum):
    """Compliance status of a certificate.

    State Machine:
        PENDING → APPROVED | REJECTED | TO_DELETE   (client review or inspection)
        APPROVED → REJECTED | TO_DELETE              (client contest)
        REJECTED → APPROVED | REJECTED               (re-inspection)
        TO_DELETE → APPROVED | REJECTED              (re-inspection)

    Folders carry no status.
    """
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    TO_DELETE = "TO_DELETE"


@dataclass(frozen=True)
class ChemicalComposition:
    """Chemical analysis in mass percent, fixed at upload."""
    carbon: float
    manganese: float
    silicon: float
    phosphorus: float
    sulfur: float

    def to_dict(self) -> dict[str, float]:
        return {
            "carbon": self.carbon,
            "manganese": self.manganese,
            "silicon": self.silicon,
            "phosphorus": self.phosphorus,
            "sulfur": self.sulfur,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Optional["ChemicalComposition"]:
        if not data:
            return None
        return cls(**{k: float(data[k]) for k in ("carbon", "manganese", "silicon", "phosphorus", "sulfur")})


@dataclass(frozen=True)
class MechanicalProperties:
    """Mechanical test results (MPa, MPa, %), fixed at upload."""
    yield_strength: float
    tensile_strength: float
    elongation: float

    def to_dict(self) -> dict[str, float]:
        return {
            "yield_strength": self.yield_strength,
            "tensile_strength": self.tensile_strength,
            "elongation": self.elongation,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Optional["MechanicalProperties"]:
        if not data:
            return None
        return cls(**{k: float(data[k]) for k in ("yield_strength", "tensile_strength", "elongation")})


@dataclass(frozen=True)
class Inspection:
    """Technical verdict metadata, written only by the quality team."""
    inspected_at: datetime
    inspected_by: str
    rejection_reason: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "inspected_at": self.inspected_at.isoformat(),
            "inspected_by": self.inspected_by,
            "rejection_reason": self.rejection_reason,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Optional["Inspection"]:
        if not data:
            return None
        return cls(
            inspected_at=_parse_datetime(data["inspected_at"]),
            inspected_by=data["inspected_by"],
            rejection_reason=data.get("rejection_reason"),
        )


@dataclass(frozen=True)
class ClientFeedback:
    """Review left by a member of the owning organization."""
    observations: Optional[str] = None
    flags: tuple[str, ...] = ()
    last_interaction_at: Optional[datetime] = None
    last_interaction_by: Optional[str] = None

    @property
    def has_contestation(self) -> bool:
        return bool(self.observations) or bool(self.flags)

    def to_dict(self) -> dict[str, Any]:
        return {
            "observations": self.observations,
            "flags": list(self.flags),
            "last_interaction_at": self.last_interaction_at.isoformat() if self.last_interaction_at else None,
            "last_interaction_by": self.last_interaction_by,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Optional["ClientFeedback"]:
        if not data:
            return None
        at = data.get("last_interaction_at")
        return cls(
            observations=data.get("observations"),
            flags=tuple(data.get("flags") or ()),
            last_interaction_at=_parse_datetime(at) if at else None,
            last_interaction_by=data.get("last_interaction_by"),
        )


@dataclass(frozen=True)
class QualityDocument:
    """A steel certificate or a folder in the certificate tree.

    chemical_composition and mechanical_properties are set at upload and never
    touched by the workflow. inspection is owned by the quality team,
    client_feedback by the owning organization.
    """
    id: str
    owner_org_id: str
    name: str
    is_folder: bool = False
    parent_folder_id: Optional[str] = None
    status: Optional[QualityStatus] = QualityStatus.PENDING
    owner_org_name: Optional[str] = None
    project_name: Optional[str] = None
    batch_number: Optional[str] = None
    grade: Optional[str] = None
    invoice_number: Optional[str] = None
    file_type: Optional[str] = None
    size: Optional[int] = None
    url: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    uploaded_by: Optional[str] = None
    chemical_composition: Optional[ChemicalComposition] = None
    mechanical_properties: Optional[MechanicalProperties] = None
    inspection: Optional[Inspection] = None
    client_feedback: Optional[ClientFeedback] = None
    viewed_at: Optional[datetime] = None
    viewed_by: Optional[str] = None

    @property
    def is_root_folder(self) -> bool:
        return self.is_folder and self.parent_folder_id is None

    @property
    def is_contested(self) -> bool:
        return self.status in (QualityStatus.REJECTED, QualityStatus.TO_DELETE)

    def with_changes(self, **changes: Any) -> "QualityDocument":
        return replace(self, **changes)


@dataclass(frozen=True)
class DocumentTransition:
    """Outcome of a state machine operation.

    patch holds exactly the fields to persist. An empty patch with
    changed=False means the operation was an idempotent no-op.
    """
    document: QualityDocument
    patch: dict[str, Any] = field(default_factory=dict)
    action: Optional[AuditAction] = None
    severity: Optional[AuditSeverity] = None
    context: dict[str, Any] = field(default_factory=dict)
    changed: bool = True


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
