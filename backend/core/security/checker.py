"""
core/security/checker.py

Permission resolution - decides whether a principal may perform an action on a
feature.

Keys have the form ``feature.action``. Both sides of every comparison are
trimmed, lower-cased and synonym-folded (``view`` -> ``read``, ``edit`` ->
``update``), so a grant stored as ``products.edit`` satisfies a request for
``products.update`` and vice versa.

Two interchangeable strategies share the PermissionResolver interface:
- RolePermissionResolver: roles -> role table -> feature -> actions
- FlatGrantPermissionResolver: principal carries the keys directly
"""
from typing import Any, Dict, Iterable, Mapping, Optional, Set
from dataclasses import dataclass
from abc import ABC, abstractmethod
import logging

from core.security.context import Principal

logger = logging.getLogger(__name__)

WILDCARD = "*"

ACTION_SYNONYMS: Dict[str, str] = {
    "view": "read",
    "edit": "update",
}

# role key -> feature -> allowed actions
RolePermissionTable = Mapping[str, Mapping[str, Iterable[str]]]


def normalize_feature(feature: Any) -> str:
    return str(feature if feature is not None else "").strip().lower()


def normalize_action(action: Any) -> str:
    """Trim, lower-case and fold synonyms"""
    normalized = str(action if action is not None else "").strip().lower()
    return ACTION_SYNONYMS.get(normalized, normalized)


@dataclass(frozen=True)
class Permission:
    """
    Normalized permission

    Attributes:
        feature: feature name (e.g. "catalogproducts", "suppliers", "*")
        action: action name (e.g. "read", "update", "*")
    """

    feature: str
    action: str

    def __post_init__(self):
        object.__setattr__(self, "feature", normalize_feature(self.feature))
        object.__setattr__(self, "action", normalize_action(self.action))

    def __str__(self) -> str:
        return f"{self.feature}.{self.action}"

    @property
    def key(self) -> str:
        return str(self)

    def matches(self, other: "Permission") -> bool:
        """
        Whether this grant covers ``other`` (wildcards allowed on either part)
        """
        if self == other:
            return True
        feature_ok = self.feature == WILDCARD or self.feature == other.feature
        action_ok = self.action == WILDCARD or self.action == other.action
        return feature_ok and action_ok

    @classmethod
    def from_key(cls, key: str) -> "Permission":
        """
        Parse ``feature.action`` (``feature:action`` is accepted too)

        Raises:
            ValueError: no separator, or an empty part
        """
        raw = str(key if key is not None else "")
        separator = "." if "." in raw else ":"
        if separator not in raw:
            raise ValueError(f"Invalid permission key: {key!r}")
        feature, action = raw.split(separator, 1)
        perm = cls(feature=feature, action=action)
        if not perm.feature or not perm.action:
            raise ValueError(f"Invalid permission key: {key!r}")
        return perm


def parse_permission_keys(keys: Iterable[Any]) -> Set[Permission]:
    """Parse keys, silently dropping malformed ones"""
    parsed: Set[Permission] = set()
    for key in keys or []:
        try:
            parsed.add(Permission.from_key(key))
        except ValueError:
            logger.debug(f"Ignoring malformed permission key: {key!r}")
    return parsed


class PermissionResolver(ABC):
    """Permission strategy interface"""

    @abstractmethod
    def is_allowed(
        self,
        principal: Optional[Principal],
        permission: Permission,
        role_table: Optional[RolePermissionTable] = None,
    ) -> bool:
        """
        Args:
            principal: the actor, None when unauthenticated
            permission: normalized requested permission
            role_table: tenant role table (role-based strategy only)
        """
        raise NotImplementedError


class RolePermissionResolver(PermissionResolver):
    """
    Role-based generation

    A role is resolved in the tenant table first (raw key, then lower-cased),
    then in the default table. The principal is allowed when any role grants
    the requested permission.
    """

    def __init__(self, default_table: Optional[RolePermissionTable] = None):
        self._default_table: RolePermissionTable = default_table or {}

    @property
    def default_table(self) -> RolePermissionTable:
        return self._default_table

    def resolve_role(
        self, role: Any, role_table: Optional[RolePermissionTable] = None
    ) -> Mapping[str, Iterable[str]]:
        """Look up one role's feature -> actions mapping"""
        role_key = str(role if role is not None else "").strip()
        lowered = role_key.lower()
        for table in (role_table or {}, self._default_table):
            if role_key in table:
                return table[role_key]
            if lowered in table:
                return table[lowered]
        return {}

    def role_permissions(
        self, role: Any, role_table: Optional[RolePermissionTable] = None
    ) -> Set[Permission]:
        config = self.resolve_role(role, role_table)
        grants: Set[Permission] = set()
        for feature, actions in config.items():
            if isinstance(actions, str):
                actions = [actions]
            for action in actions or []:
                grant = Permission(feature, action)
                if grant.feature and grant.action:
                    grants.add(grant)
        return grants

    def is_allowed(
        self,
        principal: Optional[Principal],
        permission: Permission,
        role_table: Optional[RolePermissionTable] = None,
    ) -> bool:
        if principal is None or not principal.roles:
            return False
        for role in principal.roles:
            for grant in self.role_permissions(role, role_table):
                if grant.matches(permission):
                    return True
        return False


class FlatGrantPermissionResolver(PermissionResolver):
    """
    Flat-grant generation

    Allowed when the principal holds exactly ``feature.action`` or
    ``feature.*``.
    """

    def is_allowed(
        self,
        principal: Optional[Principal],
        permission: Permission,
        role_table: Optional[RolePermissionTable] = None,
    ) -> bool:
        if principal is None or not principal.permissions:
            return False
        for grant in parse_permission_keys(principal.permissions):
            if grant.feature != permission.feature:
                continue
            if grant.action == permission.action or grant.action == WILDCARD:
                return True
        return False


class PermissionChecker:
    """
    Facade over one PermissionResolver

    A deployment picks one strategy; checks never raise and degrade to False.

    Example:
        >>> checker = PermissionChecker(FlatGrantPermissionResolver())
        >>> checker.has_permission({"permissions": ["suppliers.*"]}, "suppliers", "delete")
        True
    """

    def __init__(self, resolver: Optional[PermissionResolver] = None):
        self._resolver = resolver or FlatGrantPermissionResolver()

    @property
    def resolver(self) -> PermissionResolver:
        return self._resolver

    def set_resolver(self, resolver: PermissionResolver) -> None:
        self._resolver = resolver
        logger.info(f"Permission resolver set to {type(resolver).__name__}")

    def has_permission(
        self,
        principal: Any,
        feature: Any,
        action: Any,
        role_table: Optional[RolePermissionTable] = None,
    ) -> bool:
        """
        Args:
            principal: Principal, mapping with roles/permissions, or None
            feature: feature name
            action: action name (synonyms allowed)
            role_table: tenant role table for the role-based strategy

        Returns:
            True if allowed
        """
        try:
            resolved = Principal.coerce(principal)
            if resolved is None or not resolved.has_grants():
                return False
            permission = Permission(feature, action)
            if not permission.feature or not permission.action:
                return False
            allowed = self._resolver.is_allowed(resolved, permission, role_table)
        except Exception as e:
            logger.warning(f"Permission check failed for {feature}.{action}: {e}")
            return False

        if not allowed:
            logger.debug(f"Permission denied: {permission} for {resolved!r}")
        return allowed

    def check_or_raise(
        self,
        principal: Any,
        feature: Any,
        action: Any,
        role_table: Optional[RolePermissionTable] = None,
    ) -> None:
        """
        Raises:
            PermissionDenied: the check returned False
        """
        if not self.has_permission(principal, feature, action, role_table):
            raise PermissionDenied(f"Permission denied: {normalize_feature(feature)}.{normalize_action(action)}")


class PermissionDenied(Exception):
    """Permission check failed"""

    pass


# Global checker, strategy chosen at startup
permission_checker = PermissionChecker()


def has_permission(
    principal: Any,
    feature: Any,
    action: Any,
    role_table: Optional[RolePermissionTable] = None,
    resolver: Optional[PermissionResolver] = None,
) -> bool:
    """Module-level convenience wrapper around the global checker"""
    if resolver is not None:
        return PermissionChecker(resolver).has_permission(principal, feature, action, role_table)
    return permission_checker.has_permission(principal, feature, action, role_table)


__all__ = [
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
]
