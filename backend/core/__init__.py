"""
core - framework layer of the back-office

Domain-independent building blocks:
- engine: document-write trigger bus
- search: search-index client and index provisioning
- security: principals and permission resolution

Usage:
    >>> from core.engine import trigger_bus
    >>> from core.search import SearchIndexClient, IndexEnsurer
    >>> from core.security import permission_checker, Principal
"""
