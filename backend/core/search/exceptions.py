"""
core/search/exceptions.py

Search-index error taxonomy.

- ConfigurationError: host / API key missing, fatal for the invocation
- RemoteIndexError: any unexpected non-2xx from the search engine
- IndexProvisioningError: index existence/creation returned an unexpected status
- SyncError: document upsert/delete returned an unexpected status
"""
from typing import Any, Optional


class ConfigurationError(Exception):
    """Required search configuration (host, API key) is missing"""

    pass


class RemoteIndexError(Exception):
    """
    Non-2xx response from the search engine

    Attributes:
        status: HTTP status code
        body: parsed JSON body, or raw text when the body is not JSON
    """

    def __init__(self, status: int, body: Any = None, message: Optional[str] = None):
        self.status = status
        self.body = body
        super().__init__(message or f"Search request failed ({status}): {body}")


class IndexProvisioningError(RemoteIndexError):
    """Index existence check or creation returned an unexpected status"""

    def __init__(self, index_uid: str, status: int, body: Any = None):
        self.index_uid = index_uid
        super().__init__(
            status,
            body,
            f"Could not provision index {index_uid!r} ({status}): {body}",
        )


class SyncError(RemoteIndexError):
    """Index document upsert/delete failed for one write event"""

    def __init__(
        self,
        hotel_uid: Optional[str],
        document_id: str,
        status: int,
        body: Any = None,
        operation: str = "upsert",
    ):
        self.hotel_uid = hotel_uid
        self.document_id = document_id
        self.operation = operation
        super().__init__(
            status,
            body,
            f"Index {operation} failed for hotel={hotel_uid} document={document_id} "
            f"({status}): {body}",
        )


__all__ = [
    "ConfigurationError",
    "RemoteIndexError",
    "IndexProvisioningError",
    "SyncError",
]
