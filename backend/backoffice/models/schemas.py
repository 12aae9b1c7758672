"""
Pydantic schemas for API request/response validation

Product, supplier and role bodies are documents: known fields are typed,
anything else passes through.
"""
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


# ============== Product Schemas ==============

class ProductVariant(BaseModel):
    model_config = ConfigDict(extra="allow")

    perBaseUnit: Optional[float] = None
    packages: Optional[float] = None
    baseUnitsPerPurchaseUnit: Optional[float] = None
    pricePerPurchaseUnit: Optional[float] = None


class CatalogProductCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
    brand: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    baseUnit: Optional[str] = None
    active: Optional[bool] = None


class SupplierProductForm(BaseModel):
    """Raw supplier product form; prices are derived server-side"""
    model_config = ConfigDict(extra="allow")

    supplierId: str = Field(..., min_length=1)
    supplierSku: str = Field(..., min_length=1)
    nameAtSupplier: Optional[str] = None
    currency: Optional[str] = None
    pricingModel: Optional[str] = None
    pricePerBaseUnit: Optional[Any] = None
    pricePerPurchaseUnit: Optional[Any] = None
    purchaseUnit: Optional[str] = None
    baseUnit: Optional[str] = None
    baseUnitsPerPurchaseUnit: Optional[Any] = None
    catalogProductId: Optional[str] = None
    active: Optional[bool] = None
    hasVariants: bool = False
    variants: List[ProductVariant] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")


class CreatedResponse(BaseModel):
    id: str


class ProductListResponse(BaseModel):
    products: List[Dict[str, Any]]


class SearchResponse(BaseModel):
    products: List[Dict[str, Any]]
    next_offset: Optional[int] = None
    has_more: bool = False


# ============== Import Schemas ==============

class ImportRequest(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list)
    on_existing: Literal["skip", "overwrite"] = "skip"


class ImportResponse(BaseModel):
    imported: int
    skipped: int


# ============== Permission Schemas ==============

class PermissionCheckRequest(BaseModel):
    feature: str
    action: str


class PermissionCheckResponse(BaseModel):
    allowed: bool


class PermissionCatalogResponse(BaseModel):
    features: Dict[str, List[str]]
    keys: List[str]


class UserPermissionsUpdate(BaseModel):
    permissions: List[str] = Field(default_factory=list)


# ============== Role Schemas ==============

class RoleCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    permissions: List[str] = Field(default_factory=list)


class RoleUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    description: Optional[str] = None
    permissions: Optional[List[str]] = None


# ============== Supplier Schemas ==============

class SupplierCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    active: bool = True


class SupplierUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")


# ============== Order Schemas ==============

class CartItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    supplierId: str
    supplierProductId: str
    qtyPurchaseUnits: float
    variantId: Optional[str] = None


class ShoppingCartCreate(BaseModel):
    items: List[CartItem] = Field(default_factory=list)


# ============== Auth Schemas ==============

class TokenRequest(BaseModel):
    user_id: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
