"""
Hotel back-office API entry point
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backoffice.config import settings
from backoffice.database import SessionLocal, init_db
from backoffice.routers import auth, products, permissions, roles, suppliers, orders, users

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def configure_permissions() -> None:
    """Pick the permission resolver for this deployment"""
    from core.security.checker import (
        FlatGrantPermissionResolver, RolePermissionResolver, permission_checker,
    )
    from core.security.permission import role_permission_registry
    from backoffice.security.permissions import DEFAULT_ROLE_PERMISSIONS
    from backoffice.services.role_service import RoleTableProvider

    if settings.PERMISSION_MODEL.strip().lower() == "roles":
        permission_checker.set_resolver(RolePermissionResolver(DEFAULT_ROLE_PERMISSIONS))
        role_permission_registry.set_provider(RoleTableProvider(SessionLocal))
    else:
        permission_checker.set_resolver(FlatGrantPermissionResolver())


def configure_triggers() -> None:
    """Register the catalog sync on the trigger bus"""
    from core.engine.event_bus import trigger_bus
    from backoffice.services.catalog_sync import register_sync_triggers

    trigger_bus.max_attempts = max(1, settings.TRIGGER_MAX_ATTEMPTS)
    if not settings.SEARCH_SYNC_ENABLED:
        logger.info("Search sync disabled")
        return
    if not settings.search_configured:
        logger.warning("MEILI_HOST / MEILI_API_KEY not set, search sync not registered")
        return
    register_sync_triggers(trigger_bus)
    logger.info("Search sync triggers registered")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    init_db()
    configure_permissions()
    configure_triggers()

    yield

    from core.engine.event_bus import trigger_bus
    trigger_bus.clear()


# Create app
app = FastAPI(
    title=settings.APP_NAME,
    description="Catalog, supplier, order and permission management for hotels",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(products.router)
app.include_router(permissions.router)
app.include_router(roles.router)
app.include_router(suppliers.router)
app.include_router(orders.router)
app.include_router(users.router)


@app.get("/")
def root():
    return {"name": settings.APP_NAME, "version": "1.0.0"}


@app.get("/health")
def health_check():
    """Health check"""
    return {"status": "healthy"}
