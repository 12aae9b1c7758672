# Business Services
from backoffice.services.document_store import DocumentStore, DocumentNotFoundError
from backoffice.services.product_service import ProductService, ProductExistsError, ImportResult
from backoffice.services.search_service import SearchService, SearchPage
from backoffice.services.role_service import RoleService, RoleTableProvider
from backoffice.services.supplier_service import SupplierService
from backoffice.services.order_service import OrderService
from backoffice.services.user_service import UserService
from backoffice.services.catalog_sync import CatalogSyncHandler, register_sync_triggers

__all__ = [
    'DocumentStore', 'DocumentNotFoundError',
    'ProductService', 'ProductExistsError', 'ImportResult',
    'SearchService', 'SearchPage',
    'RoleService', 'RoleTableProvider',
    'SupplierService', 'OrderService', 'UserService',
    'CatalogSyncHandler', 'register_sync_triggers',
]
