"""
core/search/index_ensure.py

Guarantees the destination index exists before a document mutation.

The ensured-index cache is scoped to one warm process and is never a source of
truth: a cold start or a miss always falls back to a real existence check.
Concurrent provisioning of the same index is resolved by accepting 409.
"""
from typing import Iterator, Optional, Set
import logging
import threading

from core.search.client import SearchIndexClient, parse_body
from core.search.exceptions import IndexProvisioningError

logger = logging.getLogger(__name__)

CREATE_ACCEPTED_STATUSES = frozenset({201, 202, 409})


class EnsuredIndexCache:
    """Thread-safe set of index uids already confirmed to exist"""

    def __init__(self):
        self._uids: Set[str] = set()
        self._lock = threading.Lock()

    def __contains__(self, index_uid: str) -> bool:
        with self._lock:
            return index_uid in self._uids

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._uids))

    def __len__(self) -> int:
        with self._lock:
            return len(self._uids)

    def add(self, index_uid: str) -> None:
        with self._lock:
            self._uids.add(index_uid)

    def discard(self, index_uid: str) -> None:
        with self._lock:
            self._uids.discard(index_uid)

    def clear(self) -> None:
        """Forget every entry (cold-start equivalent, used by tests)"""
        with self._lock:
            self._uids.clear()


class IndexEnsurer:
    """
    Index provisioning with a process-local short circuit

    Example:
        >>> ensurer = IndexEnsurer(client)
        >>> ensurer.ensure_index("catalogproducts")   # GET (+ POST if absent)
        >>> ensurer.ensure_index("catalogproducts")   # cache hit, no call
    """

    def __init__(self, client: SearchIndexClient, cache: Optional[EnsuredIndexCache] = None):
        self._client = client
        self._cache = cache if cache is not None else ensured_index_cache

    @property
    def cache(self) -> EnsuredIndexCache:
        return self._cache

    def ensure_index(self, index_uid: str) -> None:
        """
        Make sure ``index_uid`` exists

        Raises:
            IndexProvisioningError: unexpected status from the GET or the create call
        """
        if index_uid in self._cache:
            return

        response = self._client.request(f"/indexes/{index_uid}", method="GET")
        if response.status_code == 200:
            self._cache.add(index_uid)
            return

        if response.status_code != 404:
            raise IndexProvisioningError(index_uid, response.status_code, parse_body(response))

        response = self._client.request(
            "/indexes",
            method="POST",
            body={"uid": index_uid, "primaryKey": "id"},
        )
        if response.status_code not in CREATE_ACCEPTED_STATUSES:
            raise IndexProvisioningError(index_uid, response.status_code, parse_body(response))

        if response.status_code == 409:
            logger.info(f"Index {index_uid} was created concurrently")
        else:
            logger.info(f"Index {index_uid} created ({response.status_code})")
        self._cache.add(index_uid)


# Process-wide cache, reset only by a cold start
ensured_index_cache = EnsuredIndexCache()


__all__ = [
    "CREATE_ACCEPTED_STATUSES",
    "EnsuredIndexCache",
    "IndexEnsurer",
    "ensured_index_cache",
]
