"""
Stored document - one row per (collection path, document id)
"""
from datetime import datetime

from sqlalchemy import Column, String, DateTime, JSON, Index

from backoffice.database import Base


class StoredDocument(Base):
    """A schemaless document under a collection path such as hotels/h1/catalogproducts"""
    __tablename__ = "documents"

    collection = Column(String(255), primary_key=True)
    doc_id = Column(String(255), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_documents_collection", "collection"),
    )
