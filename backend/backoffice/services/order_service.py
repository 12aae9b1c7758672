"""
Order service - shopping carts of supplier products
"""
from typing import Any, Dict, List, Mapping, Optional
import logging

from backoffice.collections import SHOPPING_CARTS, hotel_collection
from backoffice.services.document_store import DocumentStore

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    return str(value if value is not None else "").strip()


def _number(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def sanitize_cart_items(items: List[Mapping[str, Any]], timestamp: Any = None) -> List[Dict[str, Any]]:
    """
    Keep items with a positive quantity and both supplier ids; normalize fields
    """
    sanitized = []
    for item in items or []:
        quantity = _number(item.get("qtyPurchaseUnits"))
        if quantity <= 0:
            continue
        cleaned = {
            "supplierId": _text(item.get("supplierId")),
            "supplierProductId": _text(item.get("supplierProductId")),
            "variantId": _text(item.get("variantId")),
            "qtyPurchaseUnits": quantity,
            "supplierSku": _text(item.get("supplierSku")),
            "supplierProductName": _text(item.get("supplierProductName")),
            "purchaseUnit": _text(item.get("purchaseUnit")),
            "pricingModel": _text(item.get("pricingModel")),
            "pricePerPurchaseUnit": _number(item.get("pricePerPurchaseUnit")),
            "currency": _text(item.get("currency")) or "EUR",
            "baseUnit": _text(item.get("baseUnit")),
            "baseUnitsPerPurchaseUnit": _number(item.get("baseUnitsPerPurchaseUnit")),
            "updatedAt": timestamp,
        }
        if cleaned["supplierId"] and cleaned["supplierProductId"]:
            sanitized.append(cleaned)
    return sanitized


class OrderService:
    """Shopping carts per hotel"""

    def __init__(self, store: DocumentStore):
        self.store = store

    def get_shopping_carts(self, hotel_uid: str) -> List[Dict[str, Any]]:
        """Newest first; items always a list"""
        if not hotel_uid:
            return []
        carts = self.store.list(hotel_collection(hotel_uid, SHOPPING_CARTS))
        for cart in carts:
            if not isinstance(cart.get("items"), list):
                cart["items"] = []
        carts.sort(key=lambda c: str(c.get("createdAt") or ""), reverse=True)
        return carts

    def create_shopping_cart(
        self,
        hotel_uid: str,
        items: List[Mapping[str, Any]],
        created_by: Optional[str] = None,
    ) -> str:
        """
        Raises:
            ValueError: no valid item left after sanitizing
        """
        now = self.store.server_timestamp()
        sanitized = sanitize_cart_items(items, now)
        if not sanitized:
            raise ValueError("Add at least one supplier product")

        cart_id = self.store.add(
            hotel_collection(hotel_uid, SHOPPING_CARTS),
            {
                "createdBy": created_by or "unknown",
                "createdAt": now,
                "updatedAt": now,
                "items": sanitized,
            },
        )
        logger.info(f"Shopping cart {cart_id} created for hotel {hotel_uid} ({len(sanitized)} items)")
        return cart_id
