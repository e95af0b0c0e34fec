"""
Admin Settings Endpoints

Pricing settings gated by a 4-digit security code.
"""

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from app.models.schemas import SecurityCodeRequest, SettingsResponse, SettingsUpdateRequest
from app.services.settings_service import (
    SecurityCodeError,
    SettingsError,
    get_settings_service,
)

router = APIRouter()


def _error_response(error: SettingsError) -> JSONResponse:
    body = {"detail": str(error)}
    if isinstance(error, SecurityCodeError) and error.needs_generation:
        body["needsGeneration"] = True
    return JSONResponse(status_code=error.status_code, content=body)


@router.get("", response_model=SettingsResponse)
async def get_settings():
    """Current pricing settings (the security code hash is never returned)"""
    try:
        return await get_settings_service().get_public_settings()
    except SettingsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("")
async def update_settings(request: SettingsUpdateRequest):
    """
    Update pricing and reprice every repair task

    - **pricing**: wage 0-200, materialMarkup >= 1, fees 0-1
    - **securityCode**: current, unexpired 4-digit code
    """
    try:
        return await get_settings_service().update_settings(
            request.pricing.model_dump(),
            request.securityCode,
            updated_by=request.updatedBy
        )
    except SettingsError as e:
        return _error_response(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/security-code")
async def verify_security_code(request: SecurityCodeRequest):
    """
    Verify a security code

    Returns 400 with needsGeneration when no code was ever generated,
    403 when the code is wrong or expired.
    """
    try:
        return await get_settings_service().verify_security_code(request.securityCode)
    except SettingsError as e:
        return _error_response(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/security-code")
async def generate_security_code():
    """
    Generate a new security code

    The plain code is returned only in this response; only its hash is stored.
    """
    try:
        return await get_settings_service().generate_security_code()
    except SettingsError as e:
        return _error_response(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
