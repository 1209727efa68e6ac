"""
API key validation endpoint.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from key_manager.api.deps import get_key_validator
from key_manager.api.errors import VERDICT_STATUS, error_response
from key_manager.schemas.api_key import KeyValidationResponse, ValidateKeyRequest
from key_manager.schemas.base import ErrorResponse
from key_manager.services.key_validator import KeyValidator

router = APIRouter()


@router.post(
    "/validate-apikey",
    response_model=KeyValidationResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": KeyValidationResponse, "description": "Key not found"},
        403: {"model": KeyValidationResponse, "description": "Key revoked, expired or otherwise inactive"},
        500: {"model": ErrorResponse},
    },
)
def validate_api_key(
    request: ValidateKeyRequest,
    validator: KeyValidator = Depends(get_key_validator),
):
    """
    Validate an API key, including its status and expiry.

    Rejections keep the same body shape with valid=false; the status code
    tells not-found (401) apart from inactive or expired (403).
    """
    result = validator.validate(request.api_key_to_validate)
    if not result.ok:
        return error_response(result.error)

    verdict = result.value
    body = KeyValidationResponse(
        valid=verdict.valid,
        message=verdict.message,
        verdict=verdict.verdict.value,
        status=verdict.status,
        expires=verdict.expires_at,
    )
    return JSONResponse(
        status_code=VERDICT_STATUS[verdict.verdict],
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )
