"""
Permission API tests - both permission models through the HTTP surface
"""
from unittest.mock import Mock

import pytest
from fastapi import HTTPException

from core.security.context import Principal
from core.security.permission import role_permission_registry
from backoffice.security.auth import create_access_token, ensure_hotel_access
from backoffice.security.permissions import list_all_permission_keys
from backoffice.services.document_store import DocumentStore


class TestPermissionCheckAPI:

    def test_flat_grants(self, client, viewer_headers):
        response = client.post("/permissions/check", json={"feature": "catalogproducts", "action": "view"}, headers=viewer_headers)
        assert response.json() == {"allowed": True}

        response = client.post("/permissions/check", json={"feature": "catalogproducts", "action": "edit"}, headers=viewer_headers)
        assert response.json() == {"allowed": False}

    def test_user_without_grants_denied(self, client, db_session):
        from backoffice.security.auth import create_access_token
        DocumentStore(db_session).set("users", "nobody", {"hotelUid": "hotel-1"})
        headers = {"Authorization": f"Bearer {create_access_token('nobody')}"}
        response = client.post("/permissions/check", json={"feature": "orders", "action": "read"}, headers=headers)
        assert response.json() == {"allowed": False}

    def test_unknown_user_is_401(self, client):
        from backoffice.security.auth import create_access_token
        headers = {"Authorization": f"Bearer {create_access_token('ghost')}"}
        response = client.post("/permissions/check", json={"feature": "orders", "action": "read"}, headers=headers)
        assert response.status_code == 401

    def test_catalog(self, client, viewer_headers):
        body = client.get("/permissions/catalog", headers=viewer_headers).json()
        assert "suppliers.password" in body["keys"]
        assert body["features"]["orders"] == ["create", "read", "update", "delete"]


class TestRoleModel:

    def test_default_role_table(self, roles_model, client, viewer_headers):
        """viewer role: read only, flat grants ignored"""
        response = client.post("/permissions/check", json={"feature": "orders", "action": "read"}, headers=viewer_headers)
        assert response.json() == {"allowed": True}
        response = client.post("/permissions/check", json={"feature": "catalogproducts", "action": "create"}, headers=viewer_headers)
        assert response.json() == {"allowed": False}

    def test_custom_tenant_role_grants_route_access(self, roles_model, client, auth_headers, viewer_headers):
        """A custom role document with the principal's role name overrides the default"""
        response = client.post(
            "/hotels/hotel-1/roles/",
            json={"name": "viewer", "permissions": ["catalogproducts.read", "catalogproducts.create"]},
            headers=auth_headers,
        )
        assert response.status_code == 201

        response = client.post("/hotels/hotel-1/catalogproducts", json={"name": "Milk"}, headers=viewer_headers)
        assert response.status_code == 201

    def test_registered_provider_is_used(self, roles_model, client, viewer_headers):
        provider = Mock()
        provider.get_role_table.return_value = {"viewer": {"orders": ["delete"]}}
        role_permission_registry.set_provider(provider)

        response = client.post("/permissions/check", json={"feature": "orders", "action": "delete"}, headers=viewer_headers)

        assert response.json() == {"allowed": True}
        provider.get_role_table.assert_called_with("hotel-1")


class TestTenantGuard:

    def _headers(self, db_session, user_id, hotel_claim=None, **fields):
        DocumentStore(db_session).set("users", user_id, {"permissions": list_all_permission_keys(), **fields})
        return {"Authorization": f"Bearer {create_access_token(user_id, hotel_uid=hotel_claim)}"}

    def test_user_without_hotel_denied_on_every_hotel(self, client, db_session):
        headers = self._headers(db_session, "floating")
        for hotel in ("hotel-1", "hotel-2"):
            response = client.get(f"/hotels/{hotel}/catalogproducts", headers=headers)
            assert response.status_code == 403

    def test_token_claim_binds_user_without_hotel(self, client, db_session):
        headers = self._headers(db_session, "claimed", hotel_claim="hotel-1")
        assert client.get("/hotels/hotel-1/catalogproducts", headers=headers).status_code == 200
        assert client.get("/hotels/hotel-2/catalogproducts", headers=headers).status_code == 403

    def test_user_without_hotel_cannot_edit_hotel_users(self, client, db_session, viewer_token):
        headers = self._headers(db_session, "floating")
        response = client.put("/users/viewer-1/permissions", json={"permissions": []}, headers=headers)
        assert response.status_code == 403

    def test_guard_requires_matching_hotel(self):
        ensure_hotel_access(Principal(user_id="u", hotel_uid="hotel-1"), "hotel-1")
        ensure_hotel_access(Principal(user_id="u", hotel_uid=None), None)
        for principal in (Principal(user_id="u", hotel_uid=None), Principal(user_id="u", hotel_uid="hotel-2")):
            with pytest.raises(HTTPException) as exc:
                ensure_hotel_access(principal, "hotel-1")
            assert exc.value.status_code == 403
