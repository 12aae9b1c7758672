"""
Role routes - tenant role documents for the role-based permission model
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status

from core.security.context import Principal
from backoffice.dependencies import get_store
from backoffice.models.schemas import CreatedResponse, RoleCreate, RoleUpdate
from backoffice.security.auth import require_permission
from backoffice.services.document_store import DocumentNotFoundError, DocumentStore
from backoffice.services.role_service import RoleService

router = APIRouter(prefix="/hotels/{hotelUid}/roles", tags=["Roles"])


@router.get("/", response_model=List[dict])
def list_roles(
    hotelUid: str,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission("settings", "read")),
):
    """List custom roles"""
    return RoleService(store).get_roles(hotelUid)


@router.post("/", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_role(
    hotelUid: str,
    data: RoleCreate,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission("settings", "create")),
):
    """Create a role"""
    try:
        role_id = RoleService(store).create_role(hotelUid, data.model_dump(exclude_none=True))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"id": role_id}


@router.put("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_role(
    hotelUid: str,
    role_id: str,
    data: RoleUpdate,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission("settings", "update")),
):
    """Update a role"""
    try:
        RoleService(store).update_role(hotelUid, role_id, data.model_dump(exclude_none=True))
    except DocumentNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Role not found: {role_id}")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_role(
    hotelUid: str,
    role_id: str,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission("settings", "delete")),
):
    """Delete a role"""
    if not RoleService(store).delete_role(hotelUid, role_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Role not found: {role_id}")
