"""
Tests for core.security.context.Principal and the role provider registry
"""
from unittest.mock import Mock

from core.security.context import Principal
from core.security.permission import RolePermissionProviderRegistry


class TestPrincipal:

    def test_coerce_mapping(self):
        principal = Principal.coerce({
            "uid": "u1",
            "hotelUid": "hotel-1",
            "roles": ["admin"],
            "permissions": ["orders.read"],
            "email": "a@b.test",
        })
        assert principal.user_id == "u1"
        assert principal.hotel_uid == "hotel-1"
        assert principal.roles == ["admin"]
        assert principal.permissions == ["orders.read"]

    def test_coerce_non_list_grants_as_empty(self):
        principal = Principal.coerce({"roles": "admin", "permissions": None})
        assert principal.roles == []
        assert principal.permissions == []
        assert principal.has_grants() is False

    def test_coerce_passthrough_and_rejects(self):
        principal = Principal(user_id="u1")
        assert Principal.coerce(principal) is principal
        assert Principal.coerce(None) is None
        assert Principal.coerce("u1") is None

    def test_actor_fallbacks(self):
        assert Principal(user_id="u1", email="a@b.test").actor == "a@b.test"
        assert Principal(user_id="u1").actor == "u1"
        assert Principal().actor == "unknown"


class TestRolePermissionProviderRegistry:

    def test_empty_table_without_provider_or_hotel(self):
        registry = RolePermissionProviderRegistry()
        assert registry.get_role_table("hotel-1") == {}

        provider = Mock()
        registry.set_provider(provider)
        assert registry.get_role_table(None) == {}
        provider.get_role_table.assert_not_called()

    def test_delegates_to_provider(self):
        registry = RolePermissionProviderRegistry()
        provider = Mock()
        provider.get_role_table.return_value = {"chef": {"orders": ["read"]}}
        registry.set_provider(provider)

        assert registry.has_provider() is True
        assert registry.get_role_table("hotel-1") == {"chef": {"orders": ["read"]}}
        provider.get_role_table.assert_called_once_with("hotel-1")

        registry.clear()
        assert registry.has_provider() is False
