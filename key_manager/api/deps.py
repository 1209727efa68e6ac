"""
FastAPI dependencies: application context, services and the admin gate.
"""
import logging
from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from key_manager.api.errors import ServiceErrorException
from key_manager.core.context import AppContext
from key_manager.services.admin_identity import AdminIdentity, AdminIdentityService
from key_manager.services.key_issuer import KeyIssuer
from key_manager.services.key_validator import KeyValidator
from key_manager.services.listing_service import UserListingService

logger = logging.getLogger(__name__)

# Missing or non-Bearer Authorization headers come through as None
bearer_scheme = HTTPBearer(auto_error=False)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_key_issuer(context: AppContext = Depends(get_context)) -> KeyIssuer:
    return KeyIssuer(context)


def get_key_validator(context: AppContext = Depends(get_context)) -> KeyValidator:
    return KeyValidator(context)


def get_admin_identity_service(context: AppContext = Depends(get_context)) -> AdminIdentityService:
    return AdminIdentityService(context)


def get_listing_service(context: AppContext = Depends(get_context)) -> UserListingService:
    return UserListingService(context)


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    identity_service: AdminIdentityService = Depends(get_admin_identity_service),
) -> AdminIdentity:
    """
    Gate for protected endpoints.

    Raises:
        ServiceErrorException: MissingCredential or InvalidCredential (401)
    """
    result = identity_service.verify(credentials.credentials if credentials else None)
    if not result.ok:
        raise ServiceErrorException(result.error)
    logger.debug(f"Admin credential accepted for admin id={result.value.id}")
    return result.value
