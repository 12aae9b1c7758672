"""
Product routes - catalog and supplier products of one hotel
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status

from core.search.exceptions import RemoteIndexError
from core.security.context import Principal
from backoffice.collections import CATALOG_PRODUCTS, SUPPLIER_PRODUCTS
from backoffice.config import settings
from backoffice.dependencies import get_store
from backoffice.models.schemas import (
    CatalogProductCreate, CreatedResponse, ImportRequest, ImportResponse,
    ProductListResponse, ProductUpdate, SearchResponse, SupplierProductForm,
)
from backoffice.security.auth import require_permission
from backoffice.services.document_store import DocumentNotFoundError, DocumentStore
from backoffice.services.product_service import ProductExistsError, ProductService
from backoffice.services.search_service import SearchService
from backoffice.services.supplier_pricing import build_supplier_product_payload, get_pricing_policy

router = APIRouter(prefix="/hotels/{hotelUid}", tags=["Products"])


def _not_found(product_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Product not found: {product_id}")


# ============== Catalog products ==============

@router.get("/catalogproducts", response_model=ProductListResponse)
def list_catalog_products(
    hotelUid: str,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission(CATALOG_PRODUCTS, "read")),
):
    """List catalog products"""
    return {"products": ProductService(store).get_catalog_products(hotelUid)}


@router.post("/catalogproducts", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_catalog_product(
    hotelUid: str,
    data: CatalogProductCreate,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission(CATALOG_PRODUCTS, "create")),
):
    """Create a catalog product"""
    product_id = ProductService(store).create_catalog_product(
        hotelUid, data.model_dump(exclude_none=True), principal.actor
    )
    return {"id": product_id}


@router.post("/catalogproducts/import", response_model=ImportResponse)
def import_catalog_products(
    hotelUid: str,
    request: ImportRequest,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission(CATALOG_PRODUCTS, "create")),
):
    """Bulk import catalog products"""
    result = ProductService(store).import_catalog_products(
        hotelUid, request.records, request.on_existing, principal.actor
    )
    return result.to_dict()


@router.get("/catalogproducts/search", response_model=SearchResponse)
def search_catalog_products(
    hotelUid: str,
    q: str = "",
    limit: int = Query(25, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission(CATALOG_PRODUCTS, "read")),
):
    """Full-text search, prefix search when no index is configured"""
    try:
        page = SearchService(store).search_catalog_products(hotelUid, q, limit, offset)
    except RemoteIndexError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return {"products": page.products, "next_offset": page.next_offset, "has_more": page.has_more}


@router.get("/catalogproducts/{product_id}")
def get_catalog_product(
    hotelUid: str,
    product_id: str,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission(CATALOG_PRODUCTS, "read")),
):
    """Get one catalog product"""
    product = ProductService(store).get_product(hotelUid, CATALOG_PRODUCTS, product_id)
    if product is None:
        raise _not_found(product_id)
    return product


@router.patch("/catalogproducts/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_catalog_product(
    hotelUid: str,
    product_id: str,
    data: ProductUpdate,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission(CATALOG_PRODUCTS, "update")),
):
    """Update a catalog product"""
    try:
        ProductService(store).update_product(
            hotelUid, CATALOG_PRODUCTS, product_id, data.model_dump(), principal.actor
        )
    except DocumentNotFoundError:
        raise _not_found(product_id)


@router.delete("/catalogproducts/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_catalog_product(
    hotelUid: str,
    product_id: str,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission(CATALOG_PRODUCTS, "delete")),
):
    """Delete a catalog product"""
    if not ProductService(store).delete_product(hotelUid, CATALOG_PRODUCTS, product_id):
        raise _not_found(product_id)


# ============== Supplier products ==============

@router.get("/supplierproducts", response_model=ProductListResponse)
def list_supplier_products(
    hotelUid: str,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission(SUPPLIER_PRODUCTS, "read")),
):
    """List supplier products"""
    return {"products": ProductService(store).get_supplier_products(hotelUid)}


@router.post("/supplierproducts", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_supplier_product(
    hotelUid: str,
    form: SupplierProductForm,
    overwrite_existing: bool = False,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission(SUPPLIER_PRODUCTS, "create")),
):
    """Create a supplier product; prices are derived from the form"""
    try:
        payload = build_supplier_product_payload(
            form.model_dump(), get_pricing_policy(settings.SUPPLIER_PRICING_POLICY)
        )
        product_id = ProductService(store).create_supplier_product(
            hotelUid, payload, principal.actor, overwrite_existing=overwrite_existing
        )
    except ProductExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail={"code": e.code, "id": e.product_id})
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"id": product_id}


@router.post("/supplierproducts/import", response_model=ImportResponse)
def import_supplier_products(
    hotelUid: str,
    request: ImportRequest,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission(SUPPLIER_PRODUCTS, "create")),
):
    """Bulk import supplier products"""
    result = ProductService(store).import_supplier_products(
        hotelUid, request.records, request.on_existing, principal.actor
    )
    return result.to_dict()


@router.get("/supplierproducts/{product_id}")
def get_supplier_product(
    hotelUid: str,
    product_id: str,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission(SUPPLIER_PRODUCTS, "read")),
):
    """Get one supplier product"""
    product = ProductService(store).get_product(hotelUid, SUPPLIER_PRODUCTS, product_id)
    if product is None:
        raise _not_found(product_id)
    return product


@router.patch("/supplierproducts/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_supplier_product(
    hotelUid: str,
    product_id: str,
    data: ProductUpdate,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission(SUPPLIER_PRODUCTS, "update")),
):
    """Update a supplier product; stamps priceUpdatedOn"""
    try:
        ProductService(store).update_product(
            hotelUid, SUPPLIER_PRODUCTS, product_id, data.model_dump(), principal.actor
        )
    except DocumentNotFoundError:
        raise _not_found(product_id)


@router.delete("/supplierproducts/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_supplier_product(
    hotelUid: str,
    product_id: str,
    store: DocumentStore = Depends(get_store),
    principal: Principal = Depends(require_permission(SUPPLIER_PRODUCTS, "delete")),
):
    """Delete a supplier product"""
    if not ProductService(store).delete_product(hotelUid, SUPPLIER_PRODUCTS, product_id):
        raise _not_found(product_id)
