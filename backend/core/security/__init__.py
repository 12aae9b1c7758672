"""
core/security - access control

- context: Principal (roles and/or flat grants)
- checker: Permission, resolver strategies, PermissionChecker
- permission: tenant role table provider interface

Usage:
    >>> from core.security import Principal, permission_checker
    >>> principal = Principal(user_id="u1", permissions=["catalogproducts.edit"])
    >>> permission_checker.has_permission(principal, "catalogproducts", "update")
    True
"""

from core.security.context import Principal

from core.security.checker import (
    WILDCARD,
    ACTION_SYNONYMS,
    RolePermissionTable,
    normalize_feature,
    normalize_action,
    Permission,
    parse_permission_keys,
    PermissionResolver,
    RolePermissionResolver,
    FlatGrantPermissionResolver,
    PermissionChecker,
    PermissionDenied,
    permission_checker,
    has_permission,
)

from core.security.permission import (
    IRolePermissionProvider,
    RolePermissionProviderRegistry,
    role_permission_registry,
)

__all__ = [
    "Principal",
    "WILDCARD",
    "ACTION_SYNONYMS",
    "RolePermissionTable",
    "normalize_feature",
    "normalize_action",
    "Permission",
    "parse_permission_keys",
    "PermissionResolver",
    "RolePermissionResolver",
    "FlatGrantPermissionResolver",
    "PermissionChecker",
    "PermissionDenied",
    "permission_checker",
    "has_permission",
    "IRolePermissionProvider",
    "RolePermissionProviderRegistry",
    "role_permission_registry",
]
