"""
User registration endpoint. Registering a user issues their API key.
"""
from fastapi import APIRouter, Depends, status

from key_manager.api.deps import get_key_issuer
from key_manager.api.errors import error_response
from key_manager.schemas.base import ErrorResponse
from key_manager.schemas.user import UserRegisterRequest, UserRegisterResponse
from key_manager.services.key_issuer import KeyIssuer

router = APIRouter()


@router.post(
    "/register",
    response_model=UserRegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def register_user(
    request: UserRegisterRequest,
    issuer: KeyIssuer = Depends(get_key_issuer),
):
    """
    Register a user and generate their API key.

    The full key is returned once, together with its expiry.
    """
    result = issuer.issue(request.first_name, request.last_name, request.email)
    if not result.ok:
        return error_response(result.error)

    return UserRegisterResponse(
        message="Registration successful",
        api_key=result.value.token,
        expires=result.value.expires_at,
    )
