"""
User routes - flat permission grants and display names
"""
from fastapi import APIRouter, Depends, HTTPException, status

from core.security.context import Principal
from backoffice.dependencies import get_store
from backoffice.models.schemas import UserPermissionsUpdate
from backoffice.security.auth import ensure_hotel_access, get_current_principal, require_permission
from backoffice.services.document_store import DocumentNotFoundError, DocumentStore
from backoffice.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me")
def get_me(principal: Principal = Depends(get_current_principal)):
    """Current principal"""
    return principal.to_dict()


@router.get("/{user_id}/display-name")
def get_display_name(
    user_id: str,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(get_current_principal),
):
    """Display name for a user id or e-mail"""
    return {"displayName": UserService(store).get_user_display_name(user_id)}


@router.put("/{user_id}/permissions", status_code=status.HTTP_204_NO_CONTENT)
def update_user_permissions(
    user_id: str,
    data: UserPermissionsUpdate,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission("users", "update")),
):
    """Replace a user's flat grants"""
    service = UserService(store)
    target = service.get_user(user_id)
    if target is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User not found: {user_id}")
    ensure_hotel_access(principal, target.get("hotelUid"))
    try:
        service.update_user_permissions(user_id, data.permissions)
    except DocumentNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User not found: {user_id}")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
