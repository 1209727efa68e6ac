"""
Administrator endpoints: registration, login and the protected user listing.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from key_manager.api.deps import get_admin_identity_service, get_listing_service, require_admin
from key_manager.api.errors import error_response
from key_manager.schemas.admin import AdminCredentialsRequest, AdminLoginResponse, AdminRegisterResponse
from key_manager.schemas.base import ErrorResponse
from key_manager.schemas.user import UserWithKeyResponse
from key_manager.services.admin_identity import AdminIdentity, AdminIdentityService
from key_manager.services.listing_service import UserListingService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/register",
    response_model=AdminRegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def register_admin(
    request: AdminCredentialsRequest,
    identity_service: AdminIdentityService = Depends(get_admin_identity_service),
):
    """Register a new administrator."""
    result = identity_service.register(request.email, request.password)
    if not result.ok:
        return error_response(result.error)

    return AdminRegisterResponse(
        message="Admin registered successfully.",
        id=result.value.id,
        email=result.value.email,
    )


@router.post(
    "/login",
    response_model=AdminLoginResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def login_admin(
    request: AdminCredentialsRequest,
    identity_service: AdminIdentityService = Depends(get_admin_identity_service),
):
    """
    Log in as an administrator.

    Returns a bearer credential valid for a short window. Unknown email and
    wrong password produce the same 401 response.
    """
    result = identity_service.authenticate(request.email, request.password)
    if not result.ok:
        return error_response(result.error)

    issued = result.value
    return AdminLoginResponse(
        credential=issued.credential,
        token=issued.credential,
        token_type=issued.token_type,
        expires_in=issued.expires_in,
        message="Login successful",
    )


@router.get(
    "/users",
    response_model=List[UserWithKeyResponse],
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def list_users(
    admin: AdminIdentity = Depends(require_admin),
    listing_service: UserListingService = Depends(get_listing_service),
):
    """List every user joined to its API key (admin credential required)."""
    result = listing_service.list_users_with_keys()
    if not result.ok:
        return error_response(result.error)

    logger.info(f"Admin id={admin.id} listed {len(result.value)} users")
    return [UserWithKeyResponse.model_validate(row) for row in result.value]
