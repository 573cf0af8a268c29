"""Unit tests for roles and actors"""

import pytest

from auth.roles import STAFF_ROLES, UserRole, has_any_role, parse_role
from domain.actors import Actor


class TestRoles:
    @pytest.mark.parametrize("value,expected", [
        ("CLIENT", UserRole.CLIENT),
        ("quality", UserRole.QUALITY),
        (" Admin ", UserRole.ADMIN),
    ])
    def test_parse_role(self, value, expected):
        """Test header values are case and whitespace tolerant"""
        assert parse_role(value) == expected

    def test_parse_unknown_role(self):
        with pytest.raises(ValueError):
            parse_role("OPERATOR")

    def test_has_any_role(self):
        assert has_any_role(UserRole.QUALITY, STAFF_ROLES) is True
        assert has_any_role(UserRole.CLIENT, STAFF_ROLES) is False


class TestActor:
    def test_belongs_to(self, client_actor):
        assert client_actor.belongs_to("org-acme") is True
        assert client_actor.belongs_to("org-globex") is False

    def test_actor_without_org_belongs_nowhere(self, quality_actor):
        """Test a missing organization never matches, not even a missing owner"""
        assert quality_actor.belongs_to(None) is False

    def test_display_name_falls_back_to_id(self):
        assert Actor(id="u-9", role=UserRole.CLIENT).display_name == "u-9"
