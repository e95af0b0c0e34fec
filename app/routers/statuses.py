"""
Status Endpoints

Display metadata for repair statuses. Read-only: nothing here changes or
guards a repair's status.
"""

from dataclasses import asdict

from fastapi import APIRouter, Query

from app.models.enums import StatusCategory, StatusVocabulary
from app.models.schemas import StatusListResponse
from app.services.status_classifier import classify_status, vocabulary_table

router = APIRouter()


@router.get("", response_model=StatusListResponse)
def list_statuses():
    """Every known status with workflow/customer labels, color, icon and category"""
    return {
        "statuses": vocabulary_table(),
        "categories": [category.value for category in StatusCategory],
    }


@router.get("/classify")
def classify(
    status: str = Query(..., description="Raw status string, matched exactly"),
    vocabulary: StatusVocabulary = Query(StatusVocabulary.CUSTOMER, description="Label set to return")
):
    """
    Classify a raw status string

    Unknown strings return the raw text as label with color 'default'.
    """
    return asdict(classify_status(status, vocabulary))
