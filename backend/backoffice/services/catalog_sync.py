"""
Catalog sync - mirrors tenant product documents into the search index

One document write produces exactly one index mutation:
- document gone   -> DELETE /indexes/{uid}/documents/{id} (200/202/404 ok)
- document exists -> ensure index, then POST /indexes/{uid}/documents [record]

Both are idempotent under redelivery. Failures raise; retrying is the
trigger bus's job.
"""
from datetime import date, datetime, UTC
from typing import Any, Callable, Dict, Mapping, Optional
import logging
import math

from core.engine.event_bus import DocumentWriteEvent, TriggerBus
from core.search.client import SearchConfig, SearchIndexClient, parse_body
from core.search.exceptions import SyncError
from core.search.index_ensure import EnsuredIndexCache, IndexEnsurer, ensured_index_cache
from backoffice.collections import PRODUCT_COLLECTIONS, SUPPLIER_PRODUCTS, hotel_collection_pattern
from backoffice.config import resolve_search_config

logger = logging.getLogger(__name__)

DELETE_ACCEPTED_STATUSES = frozenset({200, 202, 404})

NUMERIC_FIELDS = (
    "price",
    "baseQuantity",
    "pricePerBaseUnit",
    "pricePerPurchaseUnit",
    "baseUnitsPerPurchaseUnit",
)

STRING_FIELDS = (
    "name",
    "nameLower",
    "brand",
    "gtin",
    "sku",
    "category",
    "subcategory",
    "imageUrl",
    "baseUnit",
    "supplierId",
    "supplierSku",
    "nameAtSupplier",
    "currency",
    "pricingModel",
    "purchaseUnit",
    "catalogProductId",
    "createdBy",
    "updatedBy",
)

TIMESTAMP_FIELDS = ("createdAt", "updatedAt", "priceUpdatedOn")

VARIANT_NUMERIC_FIELDS = (
    "perBaseUnit",
    "packages",
    "baseUnitsPerPurchaseUnit",
    "pricePerPurchaseUnit",
)


def to_epoch_millis(value: Any) -> Optional[int]:
    """
    Convert a timestamp of any supported shape to epoch milliseconds

    Shapes tried in order: to_millis()/toMillis() method, datetime/date, number, numeric or
    ISO-8601 string, {seconds, nanoseconds} mapping. Anything else yields None.
    """
    if value is None:
        return None

    for method_name in ("to_millis", "toMillis"):
        method = getattr(value, method_name, None)
        if callable(method):
            try:
                return int(method())
            except (TypeError, ValueError, OverflowError):
                return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return int(value.timestamp() * 1000)

    if isinstance(value, date):
        return int(datetime(value.year, value.month, value.day, tzinfo=UTC).timestamp() * 1000)

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return int(value)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            pass
        else:
            return int(number) if math.isfinite(number) else None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return to_epoch_millis(parsed)

    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        nanoseconds = value.get("nanoseconds", value.get("_nanoseconds", 0))
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            return None
        if not math.isfinite(seconds):
            return None
        if isinstance(nanoseconds, bool) or not isinstance(nanoseconds, (int, float)):
            nanoseconds = 0
        elif not math.isfinite(nanoseconds):
            nanoseconds = 0
        return int(seconds * 1000 + nanoseconds // 1_000_000)

    return None


def to_number(value: Any) -> Optional[float]:
    """Number, or None when empty / not numeric"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text.replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def to_trimmed(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip()


def build_index_record(hotel_uid: Optional[str], document_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Translate a product document into its index record

    Only fields present on the document are copied; ``active`` is always set.
    """
    data = data or {}
    record: Dict[str, Any] = {"id": document_id, "hotelUid": hotel_uid}

    for key in STRING_FIELDS:
        if key in data:
            record[key] = to_trimmed(data[key])

    for key in NUMERIC_FIELDS:
        if key in data:
            record[key] = to_number(data[key])

    for key in TIMESTAMP_FIELDS:
        if key in data:
            record[key] = to_epoch_millis(data[key])

    if "hasVariants" in data:
        record["hasVariants"] = bool(data["hasVariants"])

    if isinstance(data.get("variants"), list):
        record["variants"] = [
            {key: to_number(variant.get(key)) for key in VARIANT_NUMERIC_FIELDS}
            for variant in data["variants"]
            if isinstance(variant, Mapping)
        ]

    record["active"] = data.get("active") is not False
    return record


class CatalogSyncHandler:
    """
    Trigger handler for tenant product collections

    Example:
        >>> handler = CatalogSyncHandler()
        >>> trigger_bus.subscribe("hotels/{hotelUid}/catalogproducts", handler)
    """

    def __init__(
        self,
        config_resolver: Callable[[], SearchConfig] = resolve_search_config,
        client_factory: Optional[Callable[[SearchConfig], SearchIndexClient]] = None,
        cache: Optional[EnsuredIndexCache] = None,
    ):
        self._config_resolver = config_resolver
        self._client_factory = client_factory
        self._cache = cache if cache is not None else ensured_index_cache

    def __call__(self, event: DocumentWriteEvent) -> Optional[int]:
        return self.handle(event)

    def index_uid_for(self, collection: str, config: SearchConfig) -> str:
        name = collection.rstrip("/").rsplit("/", 1)[-1]
        if name == SUPPLIER_PRODUCTS:
            return config.supplier_index_uid
        return config.index_uid

    def handle(self, event: DocumentWriteEvent) -> Optional[int]:
        """
        Apply one write event to the index

        Returns:
            taskUid of the upsert, None for deletes

        Raises:
            ConfigurationError: search host/key not configured
            IndexProvisioningError: index could not be ensured
            SyncError: the document mutation was rejected
        """
        config = self._config_resolver()
        client = self._make_client(config)
        try:
            index_uid = self.index_uid_for(event.collection, config)
            hotel_uid = event.params.get("hotelUid") or _hotel_from_collection(event.collection)

            if not event.exists:
                self.delete_document(client, index_uid, hotel_uid, event.document_id)
                return None

            return self.upsert_document(client, index_uid, hotel_uid, event.document_id, event.after)
        finally:
            if self._client_factory is None:
                client.close()

    def delete_document(
        self,
        client: SearchIndexClient,
        index_uid: str,
        hotel_uid: Optional[str],
        document_id: str,
    ) -> None:
        response = client.request(
            f"/indexes/{index_uid}/documents/{document_id}", method="DELETE"
        )
        if response.status_code not in DELETE_ACCEPTED_STATUSES:
            body = parse_body(response)
            logger.error(
                f"Index delete failed hotel={hotel_uid} document={document_id} "
                f"status={response.status_code} body={body}"
            )
            raise SyncError(hotel_uid, document_id, response.status_code, body, operation="delete")

        if response.status_code == 404:
            logger.info(f"Index document {document_id} already absent from {index_uid}")
        else:
            logger.info(f"Index document {document_id} deleted from {index_uid}")

    def upsert_document(
        self,
        client: SearchIndexClient,
        index_uid: str,
        hotel_uid: Optional[str],
        document_id: str,
        data: Mapping[str, Any],
    ) -> Optional[int]:
        record = build_index_record(hotel_uid, document_id, data)

        IndexEnsurer(client, self._cache).ensure_index(index_uid)

        response = client.request(
            f"/indexes/{index_uid}/documents", method="POST", body=[record]
        )
        body = parse_body(response)
        if not response.is_success:
            logger.error(
                f"Index upsert failed hotel={hotel_uid} document={document_id} "
                f"status={response.status_code} body={body}"
            )
            raise SyncError(hotel_uid, document_id, response.status_code, body, operation="upsert")

        task_uid = body.get("taskUid") if isinstance(body, dict) else None
        logger.info(f"Index document {document_id} upserted into {index_uid} (task {task_uid})")
        return task_uid

    def _make_client(self, config: SearchConfig) -> SearchIndexClient:
        if self._client_factory is not None:
            return self._client_factory(config)
        return SearchIndexClient.from_config(config)


def _hotel_from_collection(collection: str) -> Optional[str]:
    parts = collection.strip("/").split("/")
    if len(parts) >= 3 and parts[0] == "hotels":
        return parts[1]
    return None


def register_sync_triggers(bus: TriggerBus, handler: Optional[CatalogSyncHandler] = None) -> CatalogSyncHandler:
    """Subscribe the sync handler to both product collections"""
    handler = handler or CatalogSyncHandler()
    for name in PRODUCT_COLLECTIONS:
        bus.subscribe(hotel_collection_pattern(name), handler)
    return handler
