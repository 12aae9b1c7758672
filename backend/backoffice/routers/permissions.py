"""
Permission routes - check one (feature, action) for the caller, list the catalog
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.security.checker import permission_checker
from core.security.context import Principal
from backoffice.database import get_db
from backoffice.models.schemas import (
    PermissionCatalogResponse, PermissionCheckRequest, PermissionCheckResponse,
)
from backoffice.security.auth import get_current_principal, resolve_role_table
from backoffice.security.permissions import PERMISSION_CATALOG, list_all_permission_keys

router = APIRouter(prefix="/permissions", tags=["Permissions"])


@router.post("/check", response_model=PermissionCheckResponse)
def check_permission(
    request: PermissionCheckRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Whether the caller may perform the action; gates UI render/enable"""
    role_table = resolve_role_table(db, principal.hotel_uid)
    allowed = permission_checker.has_permission(principal, request.feature, request.action, role_table)
    return {"allowed": allowed}


@router.get("/catalog", response_model=PermissionCatalogResponse)
def get_permission_catalog(principal: Principal = Depends(get_current_principal)):
    """Every assignable permission key"""
    return {
        "features": {feature: list(actions) for feature, actions in PERMISSION_CATALOG.items()},
        "keys": list_all_permission_keys(),
    }
