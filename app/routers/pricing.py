"""
Pricing Endpoints

Repair price calculation with the business formula and impact previews
for proposed settings.
"""

from fastapi import APIRouter, HTTPException

from app.models.enums import SkillLevel
from app.models.schemas import ImpactRequest, PriceRequest
from app.services.pricing import (
    hourly_rate_for_skill,
    price_breakdown,
    sanitize_amount,
    to_dict,
)
from app.services.settings_service import SettingsError, get_settings_service

router = APIRouter()


@router.post("/calculate")
async def calculate_repair_price(request: PriceRequest):
    """
    Calculate a repair price

    price = round2((hours * wage + material * markup) * (1 + admin + business + consumables))

    - **laborHours** / **materialCost**: non-numeric or negative values count as 0
    - **skillLevel**: scales the wage (basic 0.75 ... expert 1.5)
    - **pricing**: settings to use instead of the stored ones
    """
    try:
        if request.pricing is not None:
            pricing = request.pricing.model_dump()
            source = "request"
        else:
            pricing = await get_settings_service().get_pricing()
            source = "stored"

        skill = SkillLevel.from_name(request.skillLevel)
        wage = hourly_rate_for_skill(pricing["wage"], skill.value)

        breakdown = price_breakdown(
            labor_hours=sanitize_amount(request.laborHours),
            material_cost=sanitize_amount(request.materialCost),
            wage=wage,
            material_markup=pricing["materialMarkup"],
            administrative_fee=pricing["administrativeFee"],
            business_fee=pricing["businessFee"],
            consumables_fee=pricing["consumablesFee"],
        )

        return {
            "price": breakdown.price,
            "skill_level": skill.value,
            "settings_source": source,
            "breakdown": to_dict(breakdown),
        }
    except SettingsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/impact")
async def preview_pricing_impact(request: ImpactRequest):
    """
    Preview how proposed pricing would change every repair task

    No security code required and nothing is written.
    """
    try:
        return await get_settings_service().preview_impact(request.pricing.model_dump())
    except SettingsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
