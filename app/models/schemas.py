"""
Pydantic Models for Request/Response Validation
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional


# Pricing Models
class PricingSettings(BaseModel):
    """Shop-wide pricing inputs for the business formula"""
    wage: float = Field(default=45.0, ge=0, le=200, description="Jeweler hourly wage (dollars)")
    materialMarkup: float = Field(default=1.5, ge=1, description="Multiplier applied to material cost")
    administrativeFee: float = Field(default=0.15, ge=0, le=1, description="Fraction, e.g. 0.15")
    businessFee: float = Field(default=0.25, ge=0, le=1, description="Fraction, e.g. 0.25")
    consumablesFee: float = Field(default=0.08, ge=0, le=1, description="Fraction, e.g. 0.08")


class PriceRequest(BaseModel):
    """Price a single repair"""
    laborHours: Any = Field(default=0, description="Hours of bench work")
    materialCost: Any = Field(default=0, description="Raw material cost (dollars)")
    skillLevel: Optional[str] = Field(None, description="basic, standard, advanced or expert")
    pricing: Optional[PricingSettings] = Field(None, description="Override the stored settings")


class ImpactRequest(BaseModel):
    """Preview how proposed settings would move task prices"""
    pricing: PricingSettings


# Settings Models
class SettingsUpdateRequest(BaseModel):
    """Code-gated pricing update"""
    pricing: PricingSettings
    securityCode: str = Field(..., description="4-digit admin security code")
    updatedBy: Optional[str] = Field(None, description="Who made the change (audit)")


class SecurityCodeRequest(BaseModel):
    """Verify an admin security code"""
    securityCode: str


# Payment Models
class PaymentStatus(BaseModel):
    """Deposit threshold flags"""
    model_config = ConfigDict(extra="allow")

    hasReached50Percent: bool = False
    amountFor50Percent: float = Field(default=0, ge=0)


class PaymentProgress(BaseModel):
    """Payment progress for a custom ticket (display only)"""
    model_config = ConfigDict(extra="allow")

    totalPaid: float = Field(default=0, ge=0)
    remainingAmount: float = Field(default=0, ge=0)
    paymentProgress: float = Field(default=0, ge=0, le=100, description="Percent paid")
    status: PaymentStatus = Field(default_factory=PaymentStatus)


# Analytics Models
class SummarizeRequest(BaseModel):
    """Run an aggregator summary over caller-supplied records"""
    records: Any = Field(default_factory=list, description="Repair records; non-lists count as empty")
    field: str = Field(default="totalCost", description="Numeric field to summarize")
    groupBy: Optional[str] = Field(None, description="Field to count by (defaults to client)")
    top: int = Field(default=3, ge=0)
    recent: int = Field(default=5, ge=0)


class RefreshResponse(BaseModel):
    """Result of a forced repair feed refresh"""
    request_id: int
    applied: bool
    record_count: int
    fetched_at: str


class StoredPricing(BaseModel):
    """Pricing as stored; not range-checked so legacy documents still read back"""
    wage: float
    materialMarkup: float
    administrativeFee: float
    businessFee: float
    consumablesFee: float


class SettingsResponse(BaseModel):
    """Public view of the admin settings document"""
    pricing: StoredPricing
    updatedAt: Optional[str] = None
    updatedBy: Optional[str] = None
    securityCodeConfigured: bool = False
    securityCodeExpiresAt: Optional[str] = None


class StatusProjection(BaseModel):
    """One status with every display projection"""
    status: str
    workflow_label: str
    customer_label: str
    description: str
    color: str
    icon: str
    category: str


class StatusListResponse(BaseModel):
    statuses: List[StatusProjection]
    categories: List[str]
