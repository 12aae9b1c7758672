"""
User service - user documents, flat permission grants and display names
"""
from typing import Any, Dict, List, Optional
import logging

from core.security.context import Principal
from backoffice.collections import USERS
from backoffice.security.permissions import unknown_permission_keys
from backoffice.services.document_store import DocumentStore

logger = logging.getLogger(__name__)


class UserService:
    """Users live in the top-level "users" collection"""

    def __init__(self, store: DocumentStore):
        self.store = store

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        if not user_id:
            raise ValueError("userId is required")
        return self.store.get(USERS, user_id)

    def update_user(self, user_id: str, payload: Dict[str, Any]) -> None:
        if not user_id:
            raise ValueError("userId is required")
        self.store.update(USERS, user_id, payload)

    def update_user_permissions(self, user_id: str, permissions: List[str]) -> None:
        """
        Replace the user's flat grants

        Raises:
            ValueError: a key is not in the permission catalog
        """
        cleaned = sorted({str(p).strip() for p in permissions or [] if str(p).strip()})
        unknown = unknown_permission_keys(cleaned)
        if unknown:
            raise ValueError(f"Unknown permission keys: {', '.join(unknown)}")
        self.update_user(user_id, {"permissions": cleaned})
        logger.info(f"Permissions of user {user_id} set to {len(cleaned)} keys")

    def get_principal(self, user_id: str) -> Optional[Principal]:
        """Principal for a user document, None when the user is unknown"""
        user = self.store.get(USERS, user_id) if user_id else None
        if user is None:
            return None
        principal = Principal.coerce(user)
        principal.user_id = user_id
        return principal

    def get_user_display_name(self, identifier: Optional[str]) -> str:
        """
        "First Last", else e-mail, else the identifier itself

        The identifier may be a user id or an e-mail address.
        """
        if not identifier:
            return "-"

        user = self.store.get(USERS, identifier)
        if user is None and "@" in identifier:
            matches = self.store.where(USERS, "email", identifier)
            user = matches[0] if matches else None

        if user is None:
            return str(identifier)

        full_name = f"{user.get('firstName') or ''} {user.get('lastName') or ''}".strip()
        return full_name or user.get("email") or str(identifier)
