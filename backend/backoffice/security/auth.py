"""
Authentication and route guards

Bearer JWT whose ``sub`` is the user document id. The principal is rebuilt
from the user document on every request, so role and grant changes apply
without re-issuing tokens.
"""
import logging
from datetime import datetime, timedelta, UTC
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from core.security.checker import RolePermissionResolver, permission_checker
from core.security.context import Principal
from core.security.permission import role_permission_registry
from backoffice.config import settings
from backoffice.database import get_db
from backoffice.services.document_store import DocumentStore
from backoffice.services.role_service import RoleService
from backoffice.services.user_service import UserService

logger = logging.getLogger(__name__)

security = HTTPBearer()


def create_access_token(user_id: str, hotel_uid: Optional[str] = None,
                        expires_minutes: Optional[int] = None) -> str:
    """Create a JWT for a user document"""
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    to_encode: Dict[str, Any] = {
        "sub": str(user_id),
        "exp": datetime.now(UTC) + timedelta(minutes=minutes),
    }
    if hotel_uid is not None:
        to_encode["hotelUid"] = hotel_uid
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode a JWT, 401 when invalid or expired"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Principal:
    """Principal of the calling user"""
    payload = decode_token(credentials.credentials)
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )

    principal = UserService(DocumentStore(db)).get_principal(user_id)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )
    if principal.hotel_uid is None and payload.get("hotelUid"):
        principal.hotel_uid = payload["hotelUid"]
    return principal


def resolve_role_table(db: Session, hotel_uid: Optional[str]) -> Optional[Dict[str, Dict[str, list]]]:
    """
    Tenant role table, only needed by the role-based resolver

    The registered provider wins; otherwise roles are read through the
    request session.
    """
    if not isinstance(permission_checker.resolver, RolePermissionResolver) or not hotel_uid:
        return None
    if role_permission_registry.has_provider():
        return role_permission_registry.get_role_table(hotel_uid)
    return RoleService(DocumentStore(db)).build_role_permission_table(hotel_uid)


def ensure_hotel_access(principal: Principal, hotel_uid: Optional[str]) -> None:
    """
    403 unless the principal belongs to ``hotel_uid``

    Every user is a member of exactly one hotel. A principal with no hotel,
    neither on its user document nor as a token claim, is denied every
    hotel-scoped request. Requests with no hotel in scope pass.
    """
    if not hotel_uid:
        return
    if principal.hotel_uid != hotel_uid:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No access to this hotel"
        )


def require_permission(feature: str, action: str):
    """
    Route guard for one (feature, action)

    Reads ``hotelUid`` from the path when present, checks tenant scope, then
    asks the global permission checker.
    """
    async def permission_guard(
        request: Request,
        principal: Principal = Depends(get_current_principal),
        db: Session = Depends(get_db),
    ) -> Principal:
        hotel_uid = request.path_params.get("hotelUid") or principal.hotel_uid
        ensure_hotel_access(principal, hotel_uid)

        role_table = resolve_role_table(db, hotel_uid)
        if not permission_checker.has_permission(principal, feature, action, role_table):
            logger.info(f"Denied {feature}.{action} for {principal.actor} on hotel {hotel_uid}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission: {feature}.{action}"
            )
        return principal
    return permission_guard
