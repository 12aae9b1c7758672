"""
Catalog product search

Uses the search index when it is configured and falls back to a nameLower
prefix scan over the document store otherwise. Hits are always re-read from
the store so stale index records never leak deleted products.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import logging

from core.search.client import SearchConfig, SearchIndexClient
from core.search.exceptions import ConfigurationError
from backoffice.collections import CATALOG_PRODUCTS, hotel_collection
from backoffice.config import resolve_search_config
from backoffice.services.document_store import DocumentStore

logger = logging.getLogger(__name__)


@dataclass
class SearchPage:
    products: List[Dict[str, Any]] = field(default_factory=list)
    next_offset: Optional[int] = None
    has_more: bool = False


def hotel_filter(hotel_uid: str) -> str:
    escaped = str(hotel_uid).replace('"', '\\"')
    return f'hotelUid = "{escaped}"'


class SearchService:
    """Catalog product search"""

    def __init__(
        self,
        store: DocumentStore,
        config_resolver: Callable[[], SearchConfig] = resolve_search_config,
        client_factory: Optional[Callable[[SearchConfig], SearchIndexClient]] = None,
    ):
        self.store = store
        self._config_resolver = config_resolver
        self._client_factory = client_factory

    def search_catalog_products(
        self,
        hotel_uid: str,
        term: str,
        page_size: int = 25,
        offset: int = 0,
    ) -> SearchPage:
        """
        Raises:
            RemoteIndexError: the search engine rejected the query
        """
        if not hotel_uid:
            return SearchPage()
        term = str(term or "").strip().lower()
        page_size = max(1, int(page_size))
        offset = max(0, int(offset or 0))

        try:
            config = self._config_resolver()
        except ConfigurationError:
            logger.debug("Search index not configured, using store prefix search")
            return self._search_store(hotel_uid, term, page_size, offset)

        return self._search_index(config, hotel_uid, term, page_size, offset)

    def _search_index(
        self,
        config: SearchConfig,
        hotel_uid: str,
        term: str,
        page_size: int,
        offset: int,
    ) -> SearchPage:
        if self._client_factory is not None:
            client = self._client_factory(config)
        else:
            client = SearchIndexClient.from_config(config, use_search_key=True)
        try:
            payload = client.request_json(
                f"/indexes/{config.index_uid}/search",
                method="POST",
                body={
                    "q": term,
                    "limit": page_size,
                    "offset": offset,
                    "filter": hotel_filter(hotel_uid),
                },
            ) or {}
        finally:
            if self._client_factory is None:
                client.close()

        hit_ids = [str(hit.get("id") or "") for hit in payload.get("hits") or []]
        hit_ids = [hit_id for hit_id in hit_ids if hit_id]
        if not hit_ids:
            return SearchPage()

        docs = self.store.get_many(hotel_collection(hotel_uid, CATALOG_PRODUCTS), hit_ids)
        products = [docs[hit_id] for hit_id in hit_ids if hit_id in docs]

        estimated_total = int(payload.get("estimatedTotalHits") or 0)
        next_offset = offset + len(hit_ids)
        has_more = next_offset < estimated_total
        return SearchPage(products=products, next_offset=next_offset if has_more else None, has_more=has_more)

    def _search_store(self, hotel_uid: str, term: str, page_size: int, offset: int) -> SearchPage:
        products = self.store.list(hotel_collection(hotel_uid, CATALOG_PRODUCTS))
        if term:
            products = [p for p in products if str(p.get("nameLower") or "").startswith(term)]
        products.sort(key=lambda p: (str(p.get("nameLower") or ""), p["id"]))

        page = products[offset:offset + page_size]
        has_more = offset + page_size < len(products)
        return SearchPage(
            products=page,
            next_offset=offset + len(page) if has_more else None,
            has_more=has_more,
        )
