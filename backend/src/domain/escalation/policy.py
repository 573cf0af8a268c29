"""Escalation policy.

A single place that answers "who may move work to whom, and with which
evidence". Both the ticket workflow (flow escalation) and the certificate
state machine (mandatory evidence for a rejection) consult it, so the rule
never has to be restated at a call site.

Rule table:
┌─────────┬────────────────────┬───────────────────┬───────────────────┐
│ Role    │ From flow          │ To flow           │ Required evidence │
├─────────┼────────────────────┼───────────────────┼───────────────────┤
│ QUALITY │ CLIENT_TO_QUALITY  │ QUALITY_TO_ADMIN  │ reason            │
└─────────┴────────────────────┴───────────────────┴───────────────────┘
Everything else is denied.
"""

from dataclasses import dataclass
from typing import Any, Optional, assert_never

from auth.roles import UserRole
from domain.tickets.models import TicketFlow


@dataclass(frozen=True)
class EscalationDecision:
    """Result of an escalation check.

    reason is a human-readable explanation, filled in when allowed is False.
    """
    allowed: bool
    required_evidence: tuple[str, ...] = ()
    reason: Optional[str] = None

    def missing_evidence(self, **fields: Any) -> list[str]:
        """Names of required evidence fields that are missing or blank."""
        return [name for name in self.required_evidence if not _present(fields.get(name))]


_ESCALATION_RULES: dict[tuple[UserRole, TicketFlow, TicketFlow], tuple[str, ...]] = {
    (UserRole.QUALITY, TicketFlow.CLIENT_TO_QUALITY, TicketFlow.QUALITY_TO_ADMIN): ("reason",),
}


class EscalationPolicy:
    """Pure decision functions for escalation and evidence requirements."""

    def evaluate(
        self,
        actor_role: UserRole,
        current_flow: TicketFlow,
        target_flow: TicketFlow,
    ) -> EscalationDecision:
        """Decide whether actor_role may move a ticket from current_flow to target_flow.

        Args:
            actor_role: Role of the actor requesting the escalation
            current_flow: Flow the ticket is currently in
            target_flow: Flow the ticket should be moved to

        Returns:
            EscalationDecision with the evidence fields the caller must supply

        Example:
            >>> EscalationPolicy().evaluate(
            ...     UserRole.QUALITY, TicketFlow.CLIENT_TO_QUALITY, TicketFlow.QUALITY_TO_ADMIN
            ... ).allowed
            True
        """
        evidence = _ESCALATION_RULES.get((actor_role, current_flow, target_flow))
        if evidence is not None:
            return EscalationDecision(allowed=True, required_evidence=evidence)

        if actor_role != UserRole.QUALITY:
            return EscalationDecision(
                allowed=False,
                reason="Only the quality team can escalate tickets",
            )
        if current_flow != TicketFlow.CLIENT_TO_QUALITY:
            return EscalationDecision(
                allowed=False,
                reason=f"Only {TicketFlow.CLIENT_TO_QUALITY.value} tickets can be escalated "
                       f"(ticket is {current_flow.value})",
            )
        return EscalationDecision(
            allowed=False,
            reason=f"Escalation from {current_flow.value} to {target_flow.value} is not supported",
        )

    def creatable_flows(self, role: UserRole) -> frozenset[TicketFlow]:
        """Flows in which a role may open new tickets."""
        match role:
            case UserRole.CLIENT:
                return frozenset({TicketFlow.CLIENT_TO_QUALITY})
            case UserRole.QUALITY:
                return frozenset({TicketFlow.QUALITY_TO_ADMIN})
            case UserRole.ADMIN:
                return frozenset()
            case _:
                assert_never(role)

    def default_flow(self, role: UserRole) -> Optional[TicketFlow]:
        flows = self.creatable_flows(role)
        return next(iter(flows)) if len(flows) == 1 else None

    def rejection_evidence(self, role: UserRole) -> tuple[str, ...]:
        """Evidence fields of which at least one must be present to reject a certificate.

        Clients justify a rejection with observations or flags, the quality
        team with a rejection reason. ADMIN does not reject certificates.
        """
        match role:
            case UserRole.CLIENT:
                return ("observations", "flags")
            case UserRole.QUALITY:
                return ("rejection_reason",)
            case UserRole.ADMIN:
                return ()
            case _:
                assert_never(role)

    def has_rejection_evidence(self, role: UserRole, **fields: Any) -> bool:
        required = self.rejection_evidence(role)
        return bool(required) and any(_present(fields.get(name)) for name in required)


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, frozenset)):
        return any(_present(v) for v in value)
    return True


default_policy = EscalationPolicy()
