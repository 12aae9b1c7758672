"""
ORM models and API schemas
"""
from backoffice.models.documents import StoredDocument

__all__ = ["StoredDocument"]
