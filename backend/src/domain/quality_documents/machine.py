"""Certificate compliance state machine.

Owns every legal status change of a single certificate and decides which
fields change, which audit action describes the change, and at which
severity. It performs no I/O: the orchestrator persists the returned patch
and writes the audit record.
"""

from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, assert_never

from auth.roles import UserRole
from domain.actors import Actor
from domain.audit.models import AuditAction, AuditSeverity
from domain.errors import ForbiddenError, InvalidTransitionError, ValidationError
from domain.escalation.policy import EscalationPolicy, default_policy
from .models import (
    ClientFeedback,
    DocumentTransition,
    Inspection,
    QualityDocument,
    QualityStatus,
)
from .status import client_actionable, inspectable, validate_transition

CLIENT_DECISIONS = frozenset({QualityStatus.APPROVED, QualityStatus.REJECTED, QualityStatus.TO_DELETE})
VERDICT_DECISIONS = frozenset({QualityStatus.APPROVED, QualityStatus.REJECTED})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentStateMachine:
    """Compliance lifecycle of a certificate.

    Args:
        policy: Escalation policy used for rejection evidence requirements
        clock: Returns the current time (injectable for tests)
    """

    def __init__(
        self,
        policy: EscalationPolicy = default_policy,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.policy = policy
        self.clock = clock

    def submit_client_feedback(
        self,
        actor: Actor,
        doc: QualityDocument,
        decision: QualityStatus,
        observations: Optional[str] = None,
        flags: Optional[Iterable[str]] = None,
    ) -> DocumentTransition:
        """Record the owning organization's review of a certificate.

        Allowed while the certificate is PENDING, or APPROVED (contest after
        the fact). A rejection must be justified with observations or flags.

        Args:
            actor: Client user of the owning organization
            doc: Certificate to review
            decision: APPROVED, REJECTED or TO_DELETE
            observations: Free-text remarks
            flags: Short defect tags such as "dimension-mismatch"

        Returns:
            DocumentTransition with the new status and client feedback

        Raises:
            ForbiddenError: If the actor is not a client of the owning organization
            InvalidTransitionError: If the target is a folder or its status disallows review
            ValidationError: If a rejection carries neither observations nor flags
        """
        _require_client_of(actor, doc)
        if decision not in CLIENT_DECISIONS:
            raise InvalidTransitionError(f"{decision.value} is not a valid review decision")
        _require_certificate(doc, "reviewed")
        if not client_actionable(doc.status):
            raise InvalidTransitionError(
                f"Certificate is {doc.status.value}; it can only be reviewed while PENDING or APPROVED"
            )
        validate_transition(doc.status, decision)

        observations = _clean_text(observations)
        clean_flags = _clean_flags(flags)
        if decision == QualityStatus.REJECTED and not self.policy.has_rejection_evidence(
            UserRole.CLIENT, observations=observations, flags=clean_flags
        ):
            raise ValidationError(
                "Observations or at least one flag are required to reject a certificate",
                field="observations",
            )

        feedback = ClientFeedback(
            observations=observations,
            flags=clean_flags,
            last_interaction_at=self.clock(),
            last_interaction_by=actor.id,
        )
        patch = {"status": decision, "client_feedback": feedback}
        action, severity = _client_audit(decision)

        return DocumentTransition(
            document=doc.with_changes(**patch),
            patch=patch,
            action=action,
            severity=severity,
            context={
                "old_status": doc.status.value,
                "new_status": decision.value,
                "observations": observations,
                "flags": list(clean_flags),
            },
        )

    def submit_technical_verdict(
        self,
        actor: Actor,
        doc: QualityDocument,
        decision: QualityStatus,
        rejection_reason: Optional[str] = None,
    ) -> DocumentTransition:
        """Record the quality team's verdict on a certificate.

        Allowed from PENDING, and from REJECTED or TO_DELETE for re-inspection
        after a correction. Re-approval clears the client's contestation
        markers but keeps who last interacted and when; the audit log retains
        the full feedback history.

        Raises:
            ForbiddenError: If the actor is not on the quality team
            InvalidTransitionError: If the target is a folder, already APPROVED,
                or the decision is not APPROVED/REJECTED
            ValidationError: If a rejection has no reason
        """
        if actor.role != UserRole.QUALITY:
            raise ForbiddenError("Only the quality team can issue technical verdicts")
        if decision not in VERDICT_DECISIONS:
            raise InvalidTransitionError(
                f"{decision.value} is not a valid verdict; expected APPROVED or REJECTED"
            )
        _require_certificate(doc, "inspected")
        if not inspectable(doc.status):
            raise InvalidTransitionError(
                f"Certificate is {doc.status.value}; only PENDING, REJECTED or TO_DELETE "
                f"certificates can be inspected"
            )
        validate_transition(doc.status, decision)

        reason = _clean_text(rejection_reason)
        if decision == QualityStatus.REJECTED and not self.policy.has_rejection_evidence(
            UserRole.QUALITY, rejection_reason=reason
        ):
            raise ValidationError("Rejection reason required", field="rejection_reason")

        inspection = Inspection(
            inspected_at=self.clock(),
            inspected_by=actor.id,
            rejection_reason=reason if decision == QualityStatus.REJECTED else None,
        )
        patch = {"status": decision, "inspection": inspection}
        if decision == QualityStatus.APPROVED and doc.client_feedback is not None:
            patch["client_feedback"] = ClientFeedback(
                last_interaction_at=doc.client_feedback.last_interaction_at,
                last_interaction_by=doc.client_feedback.last_interaction_by,
            )

        if decision == QualityStatus.REJECTED:
            action, severity = AuditAction.FILE_INSPECT_REJECT, AuditSeverity.WARNING
        else:
            action, severity = AuditAction.FILE_INSPECT_APPROVE, AuditSeverity.INFO

        return DocumentTransition(
            document=doc.with_changes(**patch),
            patch=patch,
            action=action,
            severity=severity,
            context={
                "old_status": doc.status.value,
                "new_status": decision.value,
                "rejection_reason": inspection.rejection_reason,
            },
        )

    def record_first_view(self, actor: Actor, doc: QualityDocument) -> DocumentTransition:
        """Mark an approved certificate as seen by its owning organization.

        Idempotent: if the certificate was already viewed the result has
        changed=False and carries no audit action.

        Raises:
            ForbiddenError: If the actor is not a client of the owning organization
            InvalidTransitionError: If the certificate is not APPROVED (and not yet viewed)
        """
        _require_client_of(actor, doc)
        _require_certificate(doc, "marked as viewed")
        if doc.viewed_at is not None:
            return DocumentTransition(document=doc, changed=False)
        if doc.status != QualityStatus.APPROVED:
            raise InvalidTransitionError("Only approved certificates can be marked as viewed")

        patch = {"viewed_at": self.clock(), "viewed_by": actor.id}
        return DocumentTransition(
            document=doc.with_changes(**patch),
            patch=patch,
            action=AuditAction.FILE_VIEWED_BY_CLIENT,
            severity=AuditSeverity.INFO,
            context={"file_id": doc.id, "org_id": doc.owner_org_id},
        )


def _require_client_of(actor: Actor, doc: QualityDocument) -> None:
    if actor.role != UserRole.CLIENT:
        raise ForbiddenError("Only client users can review certificates")
    if not actor.belongs_to(doc.owner_org_id):
        raise ForbiddenError("Certificate belongs to another organization")


def _require_certificate(doc: QualityDocument, verb: str) -> None:
    if doc.is_folder:
        raise InvalidTransitionError(f"Folders cannot be {verb}")
    if doc.status is None:
        raise InvalidTransitionError(f"Certificate {doc.id} has no compliance status")


def _client_audit(decision: QualityStatus) -> tuple[AuditAction, AuditSeverity]:
    match decision:
        case QualityStatus.APPROVED:
            return AuditAction.CLIENT_APPROVED_FILE, AuditSeverity.INFO
        case QualityStatus.REJECTED:
            return AuditAction.CLIENT_REJECTED_FILE, AuditSeverity.WARNING
        case QualityStatus.TO_DELETE:
            return AuditAction.CLIENT_MARKED_TO_DELETE, AuditSeverity.INFO
        case QualityStatus.PENDING:
            raise InvalidTransitionError("PENDING is not a valid review decision")
        case _:
            assert_never(decision)


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _clean_flags(flags: Optional[Iterable[str]]) -> tuple[str, ...]:
    seen: list[str] = []
    for flag in flags or ():
        flag = flag.strip()
        if flag and flag not in seen:
            seen.append(flag)
    return tuple(seen)
