"""
Supplier service
"""
from typing import Any, Dict, List, Optional

from backoffice.collections import SUPPLIERS, hotel_collection
from backoffice.services.document_store import DocumentStore


class SupplierService:
    """Supplier CRUD with audit stamps"""

    def __init__(self, store: DocumentStore):
        self.store = store

    def get_suppliers(self, hotel_uid: str) -> List[Dict[str, Any]]:
        if not hotel_uid:
            return []
        return self.store.list(hotel_collection(hotel_uid, SUPPLIERS))

    def get_supplier(self, hotel_uid: str, supplier_id: str) -> Optional[Dict[str, Any]]:
        if not hotel_uid or not supplier_id:
            return None
        return self.store.get(hotel_collection(hotel_uid, SUPPLIERS), supplier_id)

    def create_supplier(self, hotel_uid: str, data: Dict[str, Any], actor: Optional[str] = None) -> str:
        now = self.store.server_timestamp()
        payload = {
            **{k: v for k, v in data.items() if k != "id"},
            "createdAt": now,
            "createdBy": actor or "unknown",
            "updatedAt": now,
            "updatedBy": actor or "unknown",
        }
        return self.store.add(hotel_collection(hotel_uid, SUPPLIERS), payload)

    def update_supplier(self, hotel_uid: str, supplier_id: str, data: Dict[str, Any], actor: Optional[str] = None) -> None:
        if not hotel_uid or not supplier_id:
            raise ValueError("hotelUid and supplierId are required")
        payload = {
            **{k: v for k, v in data.items() if k != "id"},
            "updatedAt": self.store.server_timestamp(),
            "updatedBy": actor or "unknown",
        }
        self.store.update(hotel_collection(hotel_uid, SUPPLIERS), supplier_id, payload)

    def delete_supplier(self, hotel_uid: str, supplier_id: str) -> bool:
        if not hotel_uid or not supplier_id:
            return False
        return self.store.delete(hotel_collection(hotel_uid, SUPPLIERS), supplier_id)
