"""
Supplier routes
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status

from core.security.context import Principal
from backoffice.dependencies import get_store
from backoffice.models.schemas import CreatedResponse, SupplierCreate, SupplierUpdate
from backoffice.security.auth import require_permission
from backoffice.services.document_store import DocumentNotFoundError, DocumentStore
from backoffice.services.supplier_service import SupplierService

router = APIRouter(prefix="/hotels/{hotelUid}/suppliers", tags=["Suppliers"])


@router.get("/", response_model=List[dict])
def list_suppliers(
    hotelUid: str,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission("suppliers", "read")),
):
    """List suppliers"""
    return SupplierService(store).get_suppliers(hotelUid)


@router.get("/{supplier_id}")
def get_supplier(
    hotelUid: str,
    supplier_id: str,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission("suppliers", "read")),
):
    """Get one supplier"""
    supplier = SupplierService(store).get_supplier(hotelUid, supplier_id)
    if supplier is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Supplier not found: {supplier_id}")
    return supplier


@router.post("/", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_supplier(
    hotelUid: str,
    data: SupplierCreate,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission("suppliers", "create")),
):
    """Create a supplier"""
    return {"id": SupplierService(store).create_supplier(hotelUid, data.model_dump(exclude_none=True), principal.actor)}


@router.patch("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_supplier(
    hotelUid: str,
    supplier_id: str,
    data: SupplierUpdate,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission("suppliers", "update")),
):
    """Update a supplier"""
    try:
        SupplierService(store).update_supplier(hotelUid, supplier_id, data.model_dump(), principal.actor)
    except DocumentNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Supplier not found: {supplier_id}")


@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_supplier(
    hotelUid: str,
    supplier_id: str,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission("suppliers", "delete")),
):
    """Delete a supplier"""
    if not SupplierService(store).delete_supplier(hotelUid, supplier_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Supplier not found: {supplier_id}")
