"""
Document store - get/set/query/delete over collection paths

Each write commits on its own and then publishes a DocumentWriteEvent
(before/after snapshots) on the trigger bus, the way onWrite triggers fire
after a Firestore commit. With ``defer_events`` the events are queued and
delivered by ``flush_events()``, which request handlers run as a background
task after the response is sent.
"""
from copy import deepcopy
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional
import logging
import uuid

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from core.engine.event_bus import DocumentWriteEvent, TriggerBus
from backoffice.models.documents import StoredDocument

logger = logging.getLogger(__name__)


class DocumentNotFoundError(Exception):
    """Update targeted a document that does not exist"""

    def __init__(self, collection: str, doc_id: str):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"Document not found: {collection}/{doc_id}")


def generate_document_id() -> str:
    """20-character random key"""
    return uuid.uuid4().hex[:20]


class DocumentStore:
    """Document store over one SQLAlchemy session"""

    def __init__(self, db: Session, trigger_bus: Optional[TriggerBus] = None, defer_events: bool = False):
        self.db = db
        self.trigger_bus = trigger_bus
        self.defer_events = defer_events
        self._pending: List[DocumentWriteEvent] = []

    @staticmethod
    def server_timestamp() -> datetime:
        return datetime.now(UTC)

    def _row(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        return (
            self.db.query(StoredDocument)
            .filter(StoredDocument.collection == collection, StoredDocument.doc_id == doc_id)
            .first()
        )

    # ========== reads ==========

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Document body with ``id`` added, or None"""
        if not doc_id:
            return None
        row = self._row(collection, doc_id)
        if row is None:
            return None
        return {**deepcopy(row.data or {}), "id": row.doc_id}

    def exists(self, collection: str, doc_id: str) -> bool:
        return bool(doc_id) and self._row(collection, doc_id) is not None

    def list_ids(self, collection: str) -> List[str]:
        rows = (
            self.db.query(StoredDocument.doc_id)
            .filter(StoredDocument.collection == collection)
            .order_by(StoredDocument.doc_id)
            .all()
        )
        return [r[0] for r in rows]

    def list(self, collection: str) -> List[Dict[str, Any]]:
        """All documents of a collection, ordered by id"""
        rows = (
            self.db.query(StoredDocument)
            .filter(StoredDocument.collection == collection)
            .order_by(StoredDocument.doc_id)
            .all()
        )
        return [{**deepcopy(r.data or {}), "id": r.doc_id} for r in rows]

    def where(self, collection: str, field: str, value: Any, op: str = "==") -> List[Dict[str, Any]]:
        """
        Filter one collection

        Args:
            op: "==", "array-contains" or "in"
        """
        if op not in ("==", "array-contains", "in"):
            raise ValueError(f"Unsupported operator: {op}")

        results = []
        for doc in self.list(collection):
            current = doc.get(field)
            if op == "==" and current == value:
                results.append(doc)
            elif op == "array-contains" and isinstance(current, list) and value in current:
                results.append(doc)
            elif op == "in" and current in (value or []):
                results.append(doc)
        return results

    def get_many(self, collection: str, doc_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """Documents by id; missing ids are absent from the result"""
        if not doc_ids:
            return {}
        rows = (
            self.db.query(StoredDocument)
            .filter(StoredDocument.collection == collection, StoredDocument.doc_id.in_(doc_ids))
            .all()
        )
        return {r.doc_id: {**deepcopy(r.data or {}), "id": r.doc_id} for r in rows}

    # ========== writes ==========

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> str:
        """
        Create or replace a document

        Args:
            merge: only overwrite the fields present in ``data``
        """
        if not doc_id:
            raise ValueError("doc_id is required")
        payload = self._encode(data)
        row = self._row(collection, doc_id)
        before = deepcopy(row.data) if row is not None else None

        if row is None:
            row = StoredDocument(collection=collection, doc_id=doc_id, data=payload)
            self.db.add(row)
        elif merge:
            row.data = {**(row.data or {}), **payload}
        else:
            row.data = payload

        after = deepcopy(row.data)
        self._commit()
        self._publish(collection, doc_id, before, after)
        return doc_id

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Create a document under a generated id"""
        doc_id = generate_document_id()
        while self.exists(collection, doc_id):
            doc_id = generate_document_id()
        return self.set(collection, doc_id, data)

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """
        Merge fields into an existing document

        Raises:
            DocumentNotFoundError: no such document
        """
        if not self.exists(collection, doc_id):
            raise DocumentNotFoundError(collection, doc_id)
        self.set(collection, doc_id, data, merge=True)

    def delete(self, collection: str, doc_id: str) -> bool:
        """Hard delete; returns False when nothing was there"""
        row = self._row(collection, doc_id) if doc_id else None
        if row is None:
            return False
        before = deepcopy(row.data)
        self.db.delete(row)
        self._commit()
        self._publish(collection, doc_id, before, None)
        return True

    # ========== internals ==========

    @staticmethod
    def _encode(data: Dict[str, Any]) -> Dict[str, Any]:
        payload = {k: v for k, v in (data or {}).items() if k != "id"}
        return jsonable_encoder(payload)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _publish(
        self,
        collection: str,
        doc_id: str,
        before: Optional[Dict[str, Any]],
        after: Optional[Dict[str, Any]],
    ) -> None:
        if self.trigger_bus is None:
            return
        event = DocumentWriteEvent(
            collection=collection,
            document_id=doc_id,
            before=before,
            after=after,
        )
        if self.defer_events:
            self._pending.append(event)
            return
        self.trigger_bus.publish(event)

    @property
    def pending_events(self) -> List[DocumentWriteEvent]:
        return list(self._pending)

    def flush_events(self) -> int:
        """
        Publish the events queued while ``defer_events`` is set

        Returns:
            number of events published
        """
        pending, self._pending = self._pending, []
        if self.trigger_bus is None:
            return 0
        for event in pending:
            self.trigger_bus.publish(event)
        if pending:
            logger.debug(f"Published {len(pending)} deferred write event(s)")
        return len(pending)
