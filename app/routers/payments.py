"""
Payment Endpoints

Payment progress for custom tickets, proxied from the shop API.
"""

import logging

import httpx
from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from app.models.schemas import PaymentProgress
from app.services.shop_client import get_shop_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{ticket_id}/progress", response_model=PaymentProgress)
async def get_payment_progress(ticket_id: str):
    """
    Get payment progress for a custom ticket

    - **ticket_id**: Custom ticket ID

    Returns total paid, remaining amount, percent paid and whether the
    50% deposit threshold was reached. Display only.
    """
    shop = get_shop_client()

    try:
        result = await shop.get_payment_progress(ticket_id)
        return PaymentProgress.model_validate(result)
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 404:
            raise HTTPException(status_code=404, detail=f"Ticket {ticket_id} not found")
        raise HTTPException(status_code=500, detail=str(e))
    except ValidationError as e:
        logger.warning(f"[Payments] Malformed progress payload for ticket {ticket_id}: {e}")
        raise HTTPException(status_code=500, detail="Malformed payment progress from shop API")
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
