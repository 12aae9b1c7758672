"""
Roles, suppliers, orders, users and auth API tests
"""
from backoffice.config import settings


class TestRolesAPI:

    def test_crud(self, client, auth_headers):
        response = client.post("/hotels/hotel-1/roles/", json={"name": "Chef", "permissions": ["orders.read"]}, headers=auth_headers)
        role_id = response.json()["id"]

        response = client.put(f"/hotels/hotel-1/roles/{role_id}", json={"permissions": ["orders.create"]}, headers=auth_headers)
        assert response.status_code == 204
        roles = client.get("/hotels/hotel-1/roles/", headers=auth_headers).json()
        assert roles[0]["permissions"] == ["orders.create"]

        assert client.delete(f"/hotels/hotel-1/roles/{role_id}", headers=auth_headers).status_code == 204
        assert client.delete(f"/hotels/hotel-1/roles/{role_id}", headers=auth_headers).status_code == 404

    def test_viewer_cannot_manage_roles(self, client, viewer_headers):
        response = client.post("/hotels/hotel-1/roles/", json={"name": "Chef"}, headers=viewer_headers)
        assert response.status_code == 403

    def test_unknown_permission_key_is_400(self, client, auth_headers):
        response = client.post("/hotels/hotel-1/roles/", json={"name": "Chef", "permissions": ["kitchen.fly"]}, headers=auth_headers)
        assert response.status_code == 400
        assert "kitchen.fly" in response.json()["detail"]
        assert client.get("/hotels/hotel-1/roles/", headers=auth_headers).json() == []


class TestSuppliersAPI:

    def test_crud_with_audit_stamps(self, client, auth_headers):
        response = client.post("/hotels/hotel-1/suppliers/", json={"name": "ACME", "email": "sales@acme.test"}, headers=auth_headers)
        assert response.status_code == 201
        supplier_id = response.json()["id"]

        client.patch(f"/hotels/hotel-1/suppliers/{supplier_id}", json={"phone": "123"}, headers=auth_headers)
        supplier = client.get(f"/hotels/hotel-1/suppliers/{supplier_id}", headers=auth_headers).json()
        assert supplier["phone"] == "123"
        assert supplier["createdBy"] == supplier["updatedBy"] == "admin@hotel-1.test"

        assert len(client.get("/hotels/hotel-1/suppliers/", headers=auth_headers).json()) == 1
        assert client.delete(f"/hotels/hotel-1/suppliers/{supplier_id}", headers=auth_headers).status_code == 204
        assert client.get(f"/hotels/hotel-1/suppliers/{supplier_id}", headers=auth_headers).status_code == 404

    def test_update_missing_is_404(self, client, auth_headers):
        response = client.patch("/hotels/hotel-1/suppliers/nope", json={"phone": "1"}, headers=auth_headers)
        assert response.status_code == 404


class TestOrdersAPI:

    def test_create_and_list(self, client, auth_headers):
        response = client.post(
            "/hotels/hotel-1/orders/",
            json={"items": [{"supplierId": "ACME", "supplierProductId": "ACME_SKU1", "qtyPurchaseUnits": 2}]},
            headers=auth_headers,
        )
        assert response.status_code == 201
        carts = client.get("/hotels/hotel-1/orders/", headers=auth_headers).json()
        assert carts[0]["id"] == response.json()["id"]

    def test_empty_cart_is_400(self, client, auth_headers):
        response = client.post(
            "/hotels/hotel-1/orders/",
            json={"items": [{"supplierId": "ACME", "supplierProductId": "ACME_SKU1", "qtyPurchaseUnits": 0}]},
            headers=auth_headers,
        )
        assert response.status_code == 400


class TestUsersAPI:

    def test_me(self, client, auth_headers):
        body = client.get("/users/me", headers=auth_headers).json()
        assert body["user_id"] == "admin-1"
        assert body["hotel_uid"] == "hotel-1"

    def test_update_permissions_changes_access(self, client, auth_headers, viewer_headers):
        response = client.put("/users/viewer-1/permissions", json={"permissions": ["orders.*"]}, headers=auth_headers)
        assert response.status_code == 204

        assert client.get("/hotels/hotel-1/orders/", headers=viewer_headers).status_code == 200
        assert client.get("/hotels/hotel-1/catalogproducts", headers=viewer_headers).status_code == 403

    def test_update_permissions_of_other_hotel_forbidden(self, client, auth_headers, other_hotel_token):
        response = client.put("/users/admin-2/permissions", json={"permissions": []}, headers=auth_headers)
        assert response.status_code == 403

    def test_update_permissions_unknown_user(self, client, auth_headers):
        response = client.put("/users/ghost/permissions", json={"permissions": []}, headers=auth_headers)
        assert response.status_code == 404

    def test_update_permissions_rejects_keys_outside_catalog(self, client, auth_headers, viewer_headers):
        response = client.put("/users/viewer-1/permissions", json={"permissions": ["orders.read", "payroll.read"]}, headers=auth_headers)
        assert response.status_code == 400
        assert client.get("/hotels/hotel-1/orders/", headers=viewer_headers).status_code == 403

    def test_display_name(self, client, auth_headers):
        response = client.get("/users/admin@hotel-1.test/display-name", headers=auth_headers)
        assert response.json() == {"displayName": "Ada Admin"}


class TestAuthAPI:

    def test_token_endpoint_hidden_without_debug(self, client, admin_token):
        response = client.post("/auth/token", json={"user_id": "admin-1"})
        assert response.status_code == 404

    def test_token_issued_in_debug(self, client, admin_token, monkeypatch):
        monkeypatch.setattr(settings, "DEBUG", True)
        response = client.post("/auth/token", json={"user_id": "admin-1"})
        token = response.json()["access_token"]
        assert client.get("/users/me", headers={"Authorization": f"Bearer {token}"}).status_code == 200

        assert client.post("/auth/token", json={"user_id": "ghost"}).status_code == 401


class TestHealth:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
