"""
Collection names and tenant-scoped paths
"""

CATALOG_PRODUCTS = "catalogproducts"
SUPPLIER_PRODUCTS = "supplierproducts"
SUPPLIERS = "suppliers"
ROLES = "roles"
SHOPPING_CARTS = "shoppingCarts"
USERS = "users"

PRODUCT_COLLECTIONS = (CATALOG_PRODUCTS, SUPPLIER_PRODUCTS)


def hotel_collection(hotel_uid: str, name: str) -> str:
    """hotels/{hotelUid}/{name}"""
    if not hotel_uid:
        raise ValueError("hotelUid is required")
    return f"hotels/{hotel_uid}/{name}"


def hotel_collection_pattern(name: str) -> str:
    """Trigger pattern for a tenant-scoped collection"""
    return f"hotels/{{hotelUid}}/{name}"
