"""
Permission catalog and default role table

Keys are "feature.action"; the UI role editor offers exactly these.
"""
from typing import Any, Dict, Iterable, List

from core.security.checker import Permission

CATALOG_PRODUCTS = "catalogproducts"
SUPPLIER_PRODUCTS = "supplierproducts"
SUPPLIERS = "suppliers"
ORDERS = "orders"
SETTINGS = "settings"
USERS = "users"

CRUD_ACTIONS = ["create", "read", "update", "delete"]

PERMISSION_CATALOG: Dict[str, List[str]] = {
    CATALOG_PRODUCTS: list(CRUD_ACTIONS),
    SUPPLIER_PRODUCTS: list(CRUD_ACTIONS),
    SUPPLIERS: CRUD_ACTIONS + ["password"],
    ORDERS: list(CRUD_ACTIONS),
    SETTINGS: list(CRUD_ACTIONS),
    USERS: list(CRUD_ACTIONS),
}


def list_all_permission_keys() -> List[str]:
    """Every feature.action key of the catalog"""
    return [
        f"{feature}.{action}"
        for feature, actions in PERMISSION_CATALOG.items()
        for action in actions
    ]


def is_catalog_permission(key: str) -> bool:
    """
    True for a catalog key, after the usual normalisation

    ``feature.*`` is accepted for any catalog feature.
    """
    try:
        perm = Permission.from_key(key)
    except ValueError:
        return False
    actions = PERMISSION_CATALOG.get(perm.feature)
    if actions is None:
        return False
    return perm.action == "*" or perm.action in actions


def unknown_permission_keys(keys: Iterable[Any]) -> List[str]:
    """Keys that grant nothing in the catalog, in input order"""
    return [str(key) for key in keys or [] if not is_catalog_permission(key)]


# Built-in roles, overridden by tenant role documents of the same name/id
DEFAULT_ROLE_PERMISSIONS: Dict[str, Dict[str, List[str]]] = {
    "admin": {feature: list(actions) for feature, actions in PERMISSION_CATALOG.items()},
    "manager": {
        CATALOG_PRODUCTS: list(CRUD_ACTIONS),
        SUPPLIER_PRODUCTS: list(CRUD_ACTIONS),
        SUPPLIERS: list(CRUD_ACTIONS),
        ORDERS: list(CRUD_ACTIONS),
        SETTINGS: ["read"],
        USERS: ["read"],
    },
    "kitchen": {
        CATALOG_PRODUCTS: ["read"],
        SUPPLIER_PRODUCTS: ["read"],
        SUPPLIERS: ["read"],
        ORDERS: ["create", "read"],
    },
    "viewer": {
        CATALOG_PRODUCTS: ["read"],
        SUPPLIER_PRODUCTS: ["read"],
        SUPPLIERS: ["read"],
        ORDERS: ["read"],
    },
}
