"""
Order routes - shopping carts
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status

from core.security.context import Principal
from backoffice.dependencies import get_store
from backoffice.models.schemas import CreatedResponse, ShoppingCartCreate
from backoffice.security.auth import require_permission
from backoffice.services.document_store import DocumentStore
from backoffice.services.order_service import OrderService

router = APIRouter(prefix="/hotels/{hotelUid}/orders", tags=["Orders"])


@router.get("/", response_model=List[dict])
def list_shopping_carts(
    hotelUid: str,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission("orders", "read")),
):
    """Shopping carts, newest first"""
    return OrderService(store).get_shopping_carts(hotelUid)


@router.post("/", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_shopping_cart(
    hotelUid: str,
    data: ShoppingCartCreate,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission("orders", "create")),
):
    """Create a shopping cart"""
    items = [item.model_dump() for item in data.items]
    try:
        cart_id = OrderService(store).create_shopping_cart(hotelUid, items, principal.actor)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"id": cart_id}
