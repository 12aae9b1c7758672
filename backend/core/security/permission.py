"""
core/security/permission.py - role table provider interface

The role-based strategy needs a tenant role table (role -> feature -> actions).
The app layer implements IRolePermissionProvider on top of its role documents
and registers it in RolePermissionProviderRegistry at startup.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import threading


class IRolePermissionProvider(ABC):
    """Supplies the per-tenant role table"""

    @abstractmethod
    def get_role_table(self, hotel_uid: str) -> Dict[str, Dict[str, List[str]]]:
        """Role table for one tenant, default roles included"""


class RolePermissionProviderRegistry:
    """Holds the active provider

    The app layer registers it in the lifespan:
        registry = RolePermissionProviderRegistry()
        registry.set_provider(RoleTableProvider(session_factory))
    """

    def __init__(self):
        self._provider: Optional[IRolePermissionProvider] = None
        self._lock = threading.Lock()

    def set_provider(self, provider: IRolePermissionProvider) -> None:
        with self._lock:
            self._provider = provider

    def get_provider(self) -> Optional[IRolePermissionProvider]:
        return self._provider

    def has_provider(self) -> bool:
        return self._provider is not None

    def get_role_table(self, hotel_uid: Optional[str]) -> Dict[str, Dict[str, List[str]]]:
        """Empty table when no provider is registered or no tenant is given"""
        if self._provider is None or not hotel_uid:
            return {}
        return self._provider.get_role_table(hotel_uid)

    def clear(self) -> None:
        """Drop the registration (tests)"""
        with self._lock:
            self._provider = None


# Module-level registry
role_permission_registry = RolePermissionProviderRegistry()

__all__ = [
    "IRolePermissionProvider",
    "RolePermissionProviderRegistry",
    "role_permission_registry",
]
