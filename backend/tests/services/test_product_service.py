"""
Tests for ProductService CRUD
"""
import pytest

from backoffice.services.document_store import DocumentNotFoundError
from backoffice.services.product_service import (
    ProductExistsError,
    ProductService,
    sanitize_product_payload,
    supplier_product_id,
)


@pytest.fixture
def service(store):
    return ProductService(store)


class TestHelpers:

    def test_supplier_product_id(self):
        assert supplier_product_id(" ACME ", "SKU1") == "ACME_SKU1"
        assert supplier_product_id("ACME", "") is None
        assert supplier_product_id(None, "SKU1") is None

    def test_sanitize_drops_reserved_and_none(self):
        assert sanitize_product_payload({"id": "x", "documentId": "y", "name": "Milk", "brand": None}) == {"name": "Milk"}


class TestCatalogProducts:

    def test_create_stamps_and_name_lower(self, service):
        product_id = service.create_catalog_product("hotel-1", {"name": " Whole Milk "}, "chef@hotel-1.test")
        product = service.get_product("hotel-1", "catalogproducts", product_id)
        assert product["nameLower"] == "whole milk"
        assert product["active"] is True
        assert product["createdBy"] == "chef@hotel-1.test"
        assert product["createdAt"] == product["updatedAt"]

    def test_update_refreshes_name_lower_and_stamps(self, service):
        product_id = service.create_catalog_product("hotel-1", {"name": "Milk"}, "a")
        service.update_product("hotel-1", "catalogproducts", product_id, {"name": "Oat Milk"}, "b")
        product = service.get_product("hotel-1", "catalogproducts", product_id)
        assert product["nameLower"] == "oat milk"
        assert product["updatedBy"] == "b"
        assert product["createdBy"] == "a"

    def test_update_missing_raises(self, service):
        with pytest.raises(DocumentNotFoundError):
            service.update_product("hotel-1", "catalogproducts", "nope", {"name": "x"})

    def test_delete(self, service):
        product_id = service.create_catalog_product("hotel-1", {"name": "Milk"})
        assert service.delete_product("hotel-1", "catalogproducts", product_id) is True
        assert service.delete_product("hotel-1", "catalogproducts", product_id) is False
        assert service.get_catalog_products("hotel-1") == []

    def test_tenants_are_isolated(self, service):
        service.create_catalog_product("hotel-1", {"name": "Milk"})
        assert service.get_catalog_products("hotel-2") == []
        assert service.get_catalog_products("") == []


class TestSupplierProducts:

    def test_create_uses_derived_id_and_price_stamp(self, service):
        product_id = service.create_supplier_product("hotel-1", {"supplierId": "ACME", "supplierSku": "SKU1"}, "me")
        assert product_id == "ACME_SKU1"
        product = service.get_product("hotel-1", "supplierproducts", product_id)
        assert product["priceUpdatedOn"] == product["createdAt"]

    def test_create_existing_raises_unless_overwrite(self, service):
        data = {"supplierId": "ACME", "supplierSku": "SKU1", "nameAtSupplier": "First"}
        service.create_supplier_product("hotel-1", data)
        with pytest.raises(ProductExistsError) as exc_info:
            service.create_supplier_product("hotel-1", data)
        assert exc_info.value.code == "supplier-product-exists"

        service.create_supplier_product("hotel-1", {**data, "nameAtSupplier": "Second"}, overwrite_existing=True)
        assert service.get_product("hotel-1", "supplierproducts", "ACME_SKU1")["nameAtSupplier"] == "Second"

    def test_create_requires_identity(self, service):
        with pytest.raises(ValueError):
            service.create_supplier_product("hotel-1", {"supplierId": "ACME"})

    def test_update_stamps_price_updated_on(self, service, store):
        service.create_supplier_product("hotel-1", {"supplierId": "ACME", "supplierSku": "SKU1"})
        store.update("hotels/hotel-1/supplierproducts", "ACME_SKU1", {"priceUpdatedOn": "2000-01-01T00:00:00"})
        service.update_product("hotel-1", "supplierproducts", "ACME_SKU1", {"pricePerPurchaseUnit": 3})
        product = service.get_supplier_products("hotel-1")[0]
        assert product["priceUpdatedOn"] != "2000-01-01T00:00:00"
        assert "nameLower" not in product
