"""
core/search - external search-index integration

- client: authenticated HTTP client and SearchConfig
- index_ensure: index provisioning with a process-local cache
- exceptions: ConfigurationError / RemoteIndexError / IndexProvisioningError / SyncError
"""

from core.search.client import (
    DEFAULT_TIMEOUT_SECONDS,
    SearchConfig,
    SearchIndexClient,
    parse_body,
)
from core.search.index_ensure import (
    CREATE_ACCEPTED_STATUSES,
    EnsuredIndexCache,
    IndexEnsurer,
    ensured_index_cache,
)
from core.search.exceptions import (
    ConfigurationError,
    RemoteIndexError,
    IndexProvisioningError,
    SyncError,
)

__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "SearchConfig",
    "SearchIndexClient",
    "parse_body",
    "CREATE_ACCEPTED_STATUSES",
    "EnsuredIndexCache",
    "IndexEnsurer",
    "ensured_index_cache",
    "ConfigurationError",
    "RemoteIndexError",
    "IndexProvisioningError",
    "SyncError",
]
