"""
Role service - tenant role documents and the role permission table
"""
from typing import Any, Callable, Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from core.security.permission import IRolePermissionProvider
from backoffice.collections import ROLES, hotel_collection
from backoffice.security.permissions import DEFAULT_ROLE_PERMISSIONS, unknown_permission_keys
from backoffice.services.document_store import DocumentStore

logger = logging.getLogger(__name__)


def permissions_to_feature_map(permission_keys: List[Any]) -> Dict[str, List[str]]:
    """
    ["catalogproducts.read", "orders.create"] -> {"catalogproducts": ["read"], "orders": ["create"]}

    Keys without both a feature and an action are dropped.
    """
    mapped: Dict[str, List[str]] = {}
    for key in permission_keys or []:
        raw_feature, _, raw_action = str(key or "").partition(".")
        feature = raw_feature.strip().lower()
        action = raw_action.split(".", 1)[0].strip().lower()
        if not feature or not action:
            continue
        actions = mapped.setdefault(feature, [])
        if action not in actions:
            actions.append(action)
    return mapped


def _checked_permissions(keys: Optional[List[Any]]) -> List[str]:
    """Sorted, de-duplicated keys; ValueError when one is outside the catalog"""
    unknown = unknown_permission_keys(keys)
    if unknown:
        raise ValueError(f"Unknown permission keys: {', '.join(unknown)}")
    return sorted(set(keys or []))


class RoleService:
    """Role CRUD and role table construction"""

    def __init__(self, store: DocumentStore):
        self.store = store

    def get_roles(self, hotel_uid: str) -> List[Dict[str, Any]]:
        return self.store.list(hotel_collection(hotel_uid, ROLES))

    def get_role(self, hotel_uid: str, role_id: str) -> Optional[Dict[str, Any]]:
        return self.store.get(hotel_collection(hotel_uid, ROLES), role_id)

    def create_role(self, hotel_uid: str, payload: Dict[str, Any]) -> str:
        data = dict(payload)
        data["permissions"] = _checked_permissions(data.get("permissions"))
        return self.store.add(hotel_collection(hotel_uid, ROLES), data)

    def update_role(self, hotel_uid: str, role_id: str, payload: Dict[str, Any]) -> None:
        if not role_id:
            raise ValueError("roleId is required")
        data = dict(payload)
        if "permissions" in data:
            data["permissions"] = _checked_permissions(data.get("permissions"))
        self.store.update(hotel_collection(hotel_uid, ROLES), role_id, data)

    def delete_role(self, hotel_uid: str, role_id: str) -> bool:
        if not role_id:
            raise ValueError("roleId is required")
        return self.store.delete(hotel_collection(hotel_uid, ROLES), role_id)

    def build_role_permission_table(self, hotel_uid: str) -> Dict[str, Dict[str, List[str]]]:
        """
        Default roles merged with the tenant's role documents

        Each custom role is reachable by name, lower-cased name, id and
        lower-cased id. Roles with neither name nor id, or without
        permissions, are ignored.
        """
        custom: Dict[str, Dict[str, List[str]]] = {}
        for role in self.get_roles(hotel_uid):
            role_name = str(role.get("name") or "").strip()
            role_id = str(role.get("id") or "").strip()
            permissions = role.get("permissions")
            if not isinstance(permissions, list):
                permissions = []

            if (not role_name and not role_id) or not permissions:
                continue

            mapped = permissions_to_feature_map(permissions)
            for key in (role_name, role_id):
                if key:
                    custom[key] = mapped
                    custom[key.lower()] = mapped

        table = {role: dict(features) for role, features in DEFAULT_ROLE_PERMISSIONS.items()}
        table.update(custom)
        return table


class RoleTableProvider(IRolePermissionProvider):
    """IRolePermissionProvider backed by the document store"""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def get_role_table(self, hotel_uid: str) -> Dict[str, Dict[str, List[str]]]:
        db = self._session_factory()
        try:
            return RoleService(DocumentStore(db)).build_role_permission_table(hotel_uid)
        except Exception as e:
            logger.error(f"Could not load roles for hotel {hotel_uid}: {e}", exc_info=True)
            return {role: dict(features) for role, features in DEFAULT_ROLE_PERMISSIONS.items()}
        finally:
            db.close()
