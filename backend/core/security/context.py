"""
core/security/context.py

Principal - the authenticated actor whose permissions are checked.

Two generations of principal coexist: role-based (``roles``) and flat-grant
based (``permissions``). A principal may carry either or both; which field is
consulted depends on the PermissionResolver in use.
"""
from typing import Any, Dict, List, Mapping, Optional
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


@dataclass
class Principal:
    """
    Attributes:
        user_id: user document id
        hotel_uid: tenant the principal acts for
        roles: role names or role ids (role-based generation)
        permissions: flat "feature.action" keys (flat-grant generation)
        email: optional e-mail, used as actor fallback
        metadata: extra claims
    """

    user_id: Optional[str] = None
    hotel_uid: Optional[str] = None
    roles: List[str] = field(default_factory=list)
    permissions: List[str] = field(default_factory=list)
    email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def actor(self) -> str:
        """Identifier stamped into createdBy / updatedBy"""
        return self.email or self.user_id or "unknown"

    def has_grants(self) -> bool:
        return bool(self.roles) or bool(self.permissions)

    @classmethod
    def coerce(cls, value: Any) -> Optional["Principal"]:
        """
        Accept a Principal, a mapping or None

        Mappings use the document field names (``roles``, ``permissions``,
        ``hotelUid``, ``uid``/``id``). Non-list role/permission values are
        treated as empty.
        """
        if value is None:
            return None
        if isinstance(value, Principal):
            return value
        if not isinstance(value, Mapping):
            return None

        roles = value.get("roles")
        permissions = value.get("permissions")
        return cls(
            user_id=value.get("uid") or value.get("id") or value.get("user_id"),
            hotel_uid=value.get("hotelUid") or value.get("hotel_uid"),
            roles=[str(r) for r in roles] if isinstance(roles, (list, tuple, set)) else [],
            permissions=(
                [str(p) for p in permissions]
                if isinstance(permissions, (list, tuple, set))
                else []
            ),
            email=value.get("email"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "hotel_uid": self.hotel_uid,
            "roles": list(self.roles),
            "permissions": list(self.permissions),
            "email": self.email,
        }

    def __repr__(self) -> str:
        return (
            f"Principal(user_id={self.user_id!r}, hotel_uid={self.hotel_uid!r}, "
            f"roles={self.roles!r}, permissions={len(self.permissions)})"
        )


__all__ = ["Principal"]
