"""Unit tests for the certificate status state machine transitions"""

import pytest

from domain.errors import InvalidTransitionError
from domain.quality_documents import (
    QualityStatus,
    can_transition,
    get_allowed_transitions,
    validate_transition,
)
from domain.quality_documents.status import client_actionable, inspectable

EXPECTED_EDGES = {
    (QualityStatus.PENDING, QualityStatus.APPROVED),
    (QualityStatus.PENDING, QualityStatus.REJECTED),
    (QualityStatus.PENDING, QualityStatus.TO_DELETE),
    (QualityStatus.APPROVED, QualityStatus.REJECTED),
    (QualityStatus.APPROVED, QualityStatus.TO_DELETE),
    (QualityStatus.REJECTED, QualityStatus.APPROVED),
    (QualityStatus.REJECTED, QualityStatus.REJECTED),
    (QualityStatus.TO_DELETE, QualityStatus.APPROVED),
    (QualityStatus.TO_DELETE, QualityStatus.REJECTED),
}


class TestQualityStatusStateMachine:
    """Test QualityStatus enum and state transition validation"""

    def test_quality_status_enum_values(self):
        """Test QualityStatus enum has all required values"""
        assert QualityStatus.PENDING.value == "PENDING"
        assert QualityStatus.APPROVED.value == "APPROVED"
        assert QualityStatus.REJECTED.value == "REJECTED"
        assert QualityStatus.TO_DELETE.value == "TO_DELETE"

    def test_only_documented_edges_are_reachable(self):
        """Test the full transition graph against the documented edge list"""
        actual = {
            (src, dst)
            for src in QualityStatus
            for dst in QualityStatus
            if can_transition(src, dst)
        }
        assert actual == EXPECTED_EDGES

    def test_nothing_returns_to_pending(self):
        """Test no status can transition back to PENDING"""
        for src in QualityStatus:
            assert can_transition(src, QualityStatus.PENDING) is False

    def test_approved_cannot_be_reapproved(self):
        """Test APPROVED → APPROVED is not a transition"""
        assert can_transition(QualityStatus.APPROVED, QualityStatus.APPROVED) is False

    def test_folders_never_transition(self):
        """Test a missing status (folder) has no transitions"""
        for dst in QualityStatus:
            assert can_transition(None, dst) is False

    def test_get_allowed_transitions_from_pending(self):
        """Test allowed transitions from PENDING"""
        assert get_allowed_transitions(QualityStatus.PENDING) == {
            QualityStatus.APPROVED,
            QualityStatus.REJECTED,
            QualityStatus.TO_DELETE,
        }

    def test_get_allowed_transitions_from_to_delete(self):
        """Test re-inspection edges from TO_DELETE"""
        assert get_allowed_transitions(QualityStatus.TO_DELETE) == {
            QualityStatus.APPROVED,
            QualityStatus.REJECTED,
        }

    def test_validate_transition_message_lists_allowed(self):
        """Test invalid transition error names the allowed targets"""
        with pytest.raises(InvalidTransitionError) as exc:
            validate_transition(QualityStatus.APPROVED, QualityStatus.PENDING)

        assert "APPROVED -> PENDING" in exc.value.message
        assert "['REJECTED', 'TO_DELETE']" in exc.value.message

    def test_validate_transition_rejects_folders(self):
        """Test folders are refused with a readable message"""
        with pytest.raises(InvalidTransitionError, match="Folders"):
            validate_transition(None, QualityStatus.APPROVED)

    def test_validate_transition_accepts_valid_edge(self):
        """Test a legal edge passes silently"""
        validate_transition(QualityStatus.REJECTED, QualityStatus.APPROVED)


class TestActorWindows:
    """Test which statuses each side of the review may act on"""

    @pytest.mark.parametrize("status,expected", [
        (QualityStatus.PENDING, True),
        (QualityStatus.APPROVED, True),
        (QualityStatus.REJECTED, False),
        (QualityStatus.TO_DELETE, False),
        (None, False),
    ])
    def test_client_actionable(self, status, expected):
        """Test clients review only PENDING or APPROVED certificates"""
        assert client_actionable(status) is expected

    @pytest.mark.parametrize("status,expected", [
        (QualityStatus.PENDING, True),
        (QualityStatus.APPROVED, False),
        (QualityStatus.REJECTED, True),
        (QualityStatus.TO_DELETE, True),
        (None, False),
    ])
    def test_inspectable(self, status, expected):
        """Test the quality team inspects pending and contested certificates"""
        assert inspectable(status) is expected
