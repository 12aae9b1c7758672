"""
Auth routes - development token issue

Production tokens come from the identity provider; this endpoint only
exists when DEBUG is on.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from backoffice.config import settings
from backoffice.dependencies import get_store
from backoffice.models.schemas import TokenRequest, TokenResponse
from backoffice.security.auth import create_access_token
from backoffice.services.document_store import DocumentStore
from backoffice.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/token", response_model=TokenResponse)
def issue_token(request: TokenRequest, store: DocumentStore = Depends(get_store)):
    """Issue a token for an existing user document"""
    if not settings.DEBUG:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    principal = UserService(store).get_principal(request.user_id)
    if principal is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return {"access_token": create_access_token(request.user_id, principal.hotel_uid)}
