"""Unit tests for the escalation policy"""

import pytest

from auth.roles import UserRole
from domain.escalation import EscalationDecision, EscalationPolicy
from domain.tickets.models import TicketFlow

C2Q = TicketFlow.CLIENT_TO_QUALITY
Q2A = TicketFlow.QUALITY_TO_ADMIN


@pytest.fixture
def policy() -> EscalationPolicy:
    return EscalationPolicy()


class TestEvaluate:
    """Test EscalationPolicy.evaluate"""

    def test_quality_may_escalate_client_tickets(self, policy):
        """Test the single allowed escalation requires a reason"""
        decision = policy.evaluate(UserRole.QUALITY, C2Q, Q2A)

        assert decision.allowed is True
        assert decision.required_evidence == ("reason",)
        assert decision.reason is None

    @pytest.mark.parametrize("role", [UserRole.CLIENT, UserRole.ADMIN])
    def test_other_roles_are_denied(self, policy, role):
        """Test clients and admins cannot escalate"""
        decision = policy.evaluate(role, C2Q, Q2A)

        assert decision.allowed is False
        assert decision.reason == "Only the quality team can escalate tickets"

    def test_admin_flow_cannot_be_escalated(self, policy):
        """Test QUALITY_TO_ADMIN is already the top of the chain"""
        decision = policy.evaluate(UserRole.QUALITY, Q2A, Q2A)

        assert decision.allowed is False
        assert "QUALITY_TO_ADMIN" in decision.reason

    def test_downgrade_is_not_supported(self, policy):
        """Test C2Q -> C2Q is not an escalation"""
        decision = policy.evaluate(UserRole.QUALITY, C2Q, C2Q)

        assert decision.allowed is False
        assert "not supported" in decision.reason


class TestEvidence:
    """Test evidence requirements"""

    def test_missing_evidence(self):
        """Test blank strings count as missing"""
        decision = EscalationDecision(allowed=True, required_evidence=("reason",))

        assert decision.missing_evidence(reason="  ") == ["reason"]
        assert decision.missing_evidence(reason="Contract question") == []

    def test_client_rejection_accepts_observations_or_flags(self, policy):
        """Test either field satisfies a client rejection"""
        assert policy.has_rejection_evidence(UserRole.CLIENT, observations="Bad weld") is True
        assert policy.has_rejection_evidence(UserRole.CLIENT, flags=("weld",)) is True
        assert policy.has_rejection_evidence(UserRole.CLIENT, observations=" ", flags=("",)) is False

    def test_quality_rejection_needs_reason(self, policy):
        """Test observations do not count for the quality team"""
        assert policy.has_rejection_evidence(UserRole.QUALITY, rejection_reason="Low yield") is True
        assert policy.has_rejection_evidence(UserRole.QUALITY, observations="Low yield") is False

    def test_admin_never_has_rejection_evidence(self, policy):
        """Test administration does not reject certificates"""
        assert policy.rejection_evidence(UserRole.ADMIN) == ()
        assert policy.has_rejection_evidence(UserRole.ADMIN, rejection_reason="x") is False


class TestFlows:
    """Test ticket flow defaults"""

    def test_creatable_flows(self, policy):
        assert policy.creatable_flows(UserRole.CLIENT) == {C2Q}
        assert policy.creatable_flows(UserRole.QUALITY) == {Q2A}
        assert policy.creatable_flows(UserRole.ADMIN) == frozenset()

    def test_default_flow(self, policy):
        assert policy.default_flow(UserRole.CLIENT) == C2Q
        assert policy.default_flow(UserRole.QUALITY) == Q2A
        assert policy.default_flow(UserRole.ADMIN) is None
