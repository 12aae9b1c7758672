"""
Product service - catalog and supplier products per hotel

Supplier products are keyed by "{supplierId}_{supplierSku}"; catalog products
get generated ids. The search index is not touched here: every write fires
the document trigger, and the catalog sync handler mirrors it.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging

from backoffice.collections import CATALOG_PRODUCTS, SUPPLIER_PRODUCTS, hotel_collection
from backoffice.services.document_store import DocumentStore, generate_document_id

logger = logging.getLogger(__name__)

SKIP = "skip"
OVERWRITE = "overwrite"

# Fields a caller may not set directly
RESERVED_FIELDS = ("documentId", "id", "createdAt", "updatedAt", "createdBy", "updatedBy")


class ProductExistsError(Exception):
    """A supplier product with the same supplierId/supplierSku already exists"""

    code = "supplier-product-exists"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Supplier product already exists: {product_id}")


@dataclass
class ImportResult:
    imported: int = 0
    skipped: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def supplier_product_id(supplier_id: Any, supplier_sku: Any) -> Optional[str]:
    """Supplier product key, or None when either part is blank"""
    supplier_id = str(supplier_id or "").strip()
    supplier_sku = str(supplier_sku or "").strip()
    if not supplier_id or not supplier_sku:
        return None
    return f"{supplier_id}_{supplier_sku}"


def sanitize_product_payload(product: Mapping[str, Any], drop_none: bool = True) -> Dict[str, Any]:
    """Drop reserved fields and, unless told otherwise, None values"""
    return {
        key: value
        for key, value in (product or {}).items()
        if key not in RESERVED_FIELDS and not (drop_none and value is None)
    }


def with_name_lower(data: Dict[str, Any], collection_name: str) -> Dict[str, Any]:
    """Catalog products keep a lower-cased name for prefix search"""
    if collection_name != CATALOG_PRODUCTS:
        return data
    result = dict(data)
    if isinstance(result.get("name"), str):
        result["nameLower"] = result["name"].strip().lower()
    return result


def normalize_policy(on_existing: Optional[str]) -> str:
    """Anything but "overwrite" means "skip" """
    return OVERWRITE if str(on_existing or "").strip().lower() == OVERWRITE else SKIP


class ProductService:
    """Product CRUD and bulk import"""

    def __init__(self, store: DocumentStore):
        self.store = store

    # ========== reads ==========

    def list_products(self, hotel_uid: str, collection_name: str) -> List[Dict[str, Any]]:
        if not hotel_uid:
            return []
        return self.store.list(hotel_collection(hotel_uid, collection_name))

    def get_product(self, hotel_uid: str, collection_name: str, product_id: str) -> Optional[Dict[str, Any]]:
        if not hotel_uid or not product_id:
            return None
        return self.store.get(hotel_collection(hotel_uid, collection_name), product_id)

    def get_catalog_products(self, hotel_uid: str) -> List[Dict[str, Any]]:
        return self.list_products(hotel_uid, CATALOG_PRODUCTS)

    def get_supplier_products(self, hotel_uid: str) -> List[Dict[str, Any]]:
        return self.list_products(hotel_uid, SUPPLIER_PRODUCTS)

    # ========== writes ==========

    def create_catalog_product(self, hotel_uid: str, data: Mapping[str, Any], actor: Optional[str] = None) -> str:
        collection = hotel_collection(hotel_uid, CATALOG_PRODUCTS)
        payload = self._creation_payload(data, actor, CATALOG_PRODUCTS)
        product_id = self.store.add(collection, payload)
        logger.info(f"Catalog product {product_id} created for hotel {hotel_uid}")
        return product_id

    def create_supplier_product(
        self,
        hotel_uid: str,
        data: Mapping[str, Any],
        actor: Optional[str] = None,
        overwrite_existing: bool = False,
    ) -> str:
        """
        Raises:
            ValueError: supplierId or supplierSku missing
            ProductExistsError: id taken and overwrite_existing is False
        """
        collection = hotel_collection(hotel_uid, SUPPLIER_PRODUCTS)
        product_id = supplier_product_id(data.get("supplierId"), data.get("supplierSku"))
        if product_id is None:
            raise ValueError("supplierId and supplierSku are required for supplier products")

        if not overwrite_existing and self.store.exists(collection, product_id):
            raise ProductExistsError(product_id)

        payload = self._creation_payload(data, actor, SUPPLIER_PRODUCTS)
        self.store.set(collection, product_id, payload)
        logger.info(f"Supplier product {product_id} created for hotel {hotel_uid}")
        return product_id

    def update_product(
        self,
        hotel_uid: str,
        collection_name: str,
        product_id: str,
        data: Mapping[str, Any],
        actor: Optional[str] = None,
    ) -> None:
        """
        Raises:
            ValueError: hotel or product id missing
            DocumentNotFoundError: no such product
        """
        if not hotel_uid or not product_id:
            raise ValueError("hotelUid and productId are required")
        now = self.store.server_timestamp()
        payload = with_name_lower(sanitize_product_payload(data), collection_name)
        payload["updatedAt"] = now
        payload["updatedBy"] = actor or "unknown"
        if collection_name == SUPPLIER_PRODUCTS:
            payload["priceUpdatedOn"] = now
        self.store.update(hotel_collection(hotel_uid, collection_name), product_id, payload)

    def delete_product(self, hotel_uid: str, collection_name: str, product_id: str) -> bool:
        if not hotel_uid or not product_id:
            return False
        return self.store.delete(hotel_collection(hotel_uid, collection_name), product_id)

    def _creation_payload(self, data: Mapping[str, Any], actor: Optional[str], collection_name: str) -> Dict[str, Any]:
        now = self.store.server_timestamp()
        payload = with_name_lower(sanitize_product_payload(data, drop_none=False), collection_name)
        payload["active"] = data.get("active") if data.get("active") is not None else True
        payload["createdAt"] = now
        payload["createdBy"] = actor or "unknown"
        payload["updatedAt"] = now
        payload["updatedBy"] = actor or "unknown"
        if collection_name == SUPPLIER_PRODUCTS:
            payload["priceUpdatedOn"] = now
        return payload

    # ========== import ==========

    def import_catalog_products(
        self,
        hotel_uid: str,
        records: Iterable[Mapping[str, Any]],
        on_existing: Optional[str] = SKIP,
        actor: Optional[str] = None,
    ) -> ImportResult:
        return self.import_products(hotel_uid, CATALOG_PRODUCTS, records, on_existing, actor)

    def import_supplier_products(
        self,
        hotel_uid: str,
        records: Iterable[Mapping[str, Any]],
        on_existing: Optional[str] = SKIP,
        actor: Optional[str] = None,
    ) -> ImportResult:
        return self.import_products(hotel_uid, SUPPLIER_PRODUCTS, records, on_existing, actor)

    def import_products(
        self,
        hotel_uid: str,
        collection_name: str,
        records: Iterable[Mapping[str, Any]],
        on_existing: Optional[str] = SKIP,
        actor: Optional[str] = None,
    ) -> ImportResult:
        """
        Apply a batch of records under a conflict policy

        Args:
            on_existing: "skip" leaves existing documents untouched,
                "overwrite" merge-writes onto them
            actor: stamped into createdBy / updatedBy

        Returns:
            ImportResult with imported / skipped counts

        Each record is written on its own; a failure leaves earlier records in
        place. Ids created earlier in the same batch count as existing.
        """
        if not hotel_uid:
            raise ValueError("hotelUid is required")
        strategy = normalize_policy(on_existing)
        actor = actor or "unknown"
        collection = hotel_collection(hotel_uid, collection_name)
        existing_ids = set(self.store.list_ids(collection))
        result = ImportResult()

        for record in records:
            document_id = self._target_id(record, collection_name)
            if not document_id:
                result.skipped += 1
                continue

            payload = with_name_lower(sanitize_product_payload(record), collection_name)
            exists = document_id in existing_ids

            if exists and strategy == SKIP:
                result.skipped += 1
                continue

            now = self.store.server_timestamp()
            if exists:
                payload["updatedAt"] = now
                payload["updatedBy"] = actor
                self.store.set(collection, document_id, payload, merge=True)
            else:
                payload["active"] = payload.get("active", True)
                payload["createdAt"] = now
                payload["createdBy"] = actor
                payload["updatedAt"] = now
                payload["updatedBy"] = actor
                self.store.set(collection, document_id, payload)
                existing_ids.add(document_id)

            result.imported += 1

        logger.info(
            f"Imported {collection_name} for hotel {hotel_uid}: "
            f"{result.imported} imported, {result.skipped} skipped ({strategy})"
        )
        return result

    @staticmethod
    def _target_id(record: Mapping[str, Any], collection_name: str) -> Optional[str]:
        explicit = str(record.get("documentId") or record.get("id") or "").strip()
        if explicit:
            return explicit
        if collection_name == SUPPLIER_PRODUCTS:
            return supplier_product_id(record.get("supplierId"), record.get("supplierSku"))
        return generate_document_id()
