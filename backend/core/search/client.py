"""
core/search/client.py

Search-index HTTP client - authenticated calls against a Meilisearch-compatible
engine. ``request`` never raises on HTTP status; ``request_json`` turns non-2xx
responses into RemoteIndexError.
"""
from dataclasses import dataclass
from typing import Any, Optional
import json
import logging

import httpx

from core.search.exceptions import ConfigurationError, RemoteIndexError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class SearchConfig:
    """
    Resolved search-engine configuration

    Attributes:
        host: base URL without trailing slash
        api_key: admin key used for index/document writes
        index_uid: index for catalog products
        supplier_index_uid: index for supplier products
        search_key: read-only key for search queries (falls back to api_key)
        timeout: per-request timeout in seconds
    """

    host: str
    api_key: str
    index_uid: str = "catalogproducts"
    supplier_index_uid: str = "supplierproducts"
    search_key: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def build(
        cls,
        host: Optional[str],
        api_key: Optional[str],
        index_uid: Optional[str] = None,
        supplier_index_uid: Optional[str] = None,
        search_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> "SearchConfig":
        """
        Validate raw values and build a config

        Raises:
            ConfigurationError: host or api_key is missing
        """
        host = (host or "").strip()
        api_key = (api_key or "").strip()
        if not host or not api_key:
            raise ConfigurationError(
                "Missing search configuration. Set MEILI_HOST and MEILI_API_KEY."
            )
        return cls(
            host=host.rstrip("/"),
            api_key=api_key,
            index_uid=(index_uid or "").strip() or "catalogproducts",
            supplier_index_uid=(supplier_index_uid or "").strip() or "supplierproducts",
            search_key=(search_key or "").strip() or None,
            timeout=timeout,
        )


class SearchIndexClient:
    """
    Thin authenticated wrapper around httpx

    Example:
        >>> client = SearchIndexClient("http://localhost:7700", "master-key")
        >>> client.request("/indexes/catalogproducts").status_code
        200
    """

    def __init__(
        self,
        host: str,
        api_key: str,
        http_client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._host = host.rstrip("/")
        self._api_key = api_key
        self._http = http_client or httpx.Client(timeout=timeout)

    @classmethod
    def from_config(
        cls,
        config: SearchConfig,
        http_client: Optional[httpx.Client] = None,
        use_search_key: bool = False,
    ) -> "SearchIndexClient":
        """Build a client from a resolved SearchConfig"""
        api_key = config.api_key
        if use_search_key and config.search_key:
            api_key = config.search_key
        return cls(config.host, api_key, http_client=http_client, timeout=config.timeout)

    @property
    def host(self) -> str:
        return self._host

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def request(self, path: str, method: str = "GET", body: Any = None) -> httpx.Response:
        """
        Perform one HTTP call

        Args:
            path: path relative to the host, e.g. "/indexes/catalogproducts"
            method: HTTP method
            body: JSON-serialisable payload, omitted when None

        Returns:
            The raw response, whatever its status
        """
        content = json.dumps(body) if body is not None else None
        response = self._http.request(
            method.upper(),
            f"{self._host}{path}",
            headers=self._headers(),
            content=content,
        )
        logger.debug(f"{method.upper()} {path} -> {response.status_code}")
        return response

    def request_json(self, path: str, method: str = "GET", body: Any = None) -> Any:
        """
        Perform one HTTP call and decode the JSON body

        Returns:
            Parsed JSON, or None for an empty body

        Raises:
            RemoteIndexError: non-2xx status
        """
        response = self.request(path, method=method, body=body)
        payload = parse_body(response)
        if not response.is_success:
            raise RemoteIndexError(response.status_code, payload)
        return payload

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "SearchIndexClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def parse_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON, falling back to raw text"""
    text = response.text
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "SearchConfig",
    "SearchIndexClient",
    "parse_body",
]
