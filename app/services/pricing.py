"""
Repair Pricing Calculator

Business formula (v2.0):
    labor      = labor_hours * wage
    materials  = material_cost * material_markup
    subtotal   = labor + materials
    multiplier = 1 + administrative_fee + business_fee + consumables_fee
    price      = round2(subtotal * multiplier)

All monetary values are in DOLLARS (floats), rounded half-up on the cent.
The calculator itself never touches the network; callers pass the live
settings in.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from app.models.enums import SkillLevel


DEFAULT_WAGE = 45.0
DEFAULT_MATERIAL_MARKUP = 1.5
DEFAULT_ADMINISTRATIVE_FEE = 0.15
DEFAULT_BUSINESS_FEE = 0.25
DEFAULT_CONSUMABLES_FEE = 0.08

PRICING_FORMULA = "v2.0_business_formula"

# Price moves smaller than this count as unchanged in impact previews
CHANGE_TOLERANCE = 0.01

DEFAULT_PRICING: Dict[str, float] = {
    "wage": DEFAULT_WAGE,
    "materialMarkup": DEFAULT_MATERIAL_MARKUP,
    "administrativeFee": DEFAULT_ADMINISTRATIVE_FEE,
    "businessFee": DEFAULT_BUSINESS_FEE,
    "consumablesFee": DEFAULT_CONSUMABLES_FEE,
}


# ============== Dataclasses ==============

@dataclass
class PriceBreakdown:
    """Components recorded next to a calculated price"""
    labor_hours: float
    wage: float
    labor_cost: float
    material_cost: float
    material_markup: float
    marked_up_materials: float
    subtotal: float
    administrative_fee: float
    business_fee: float
    consumables_fee: float
    business_multiplier: float
    price: float
    formula: str = PRICING_FORMULA


@dataclass
class TaskPriceUpdate:
    """New base price for one repair task"""
    task_id: Any
    sku: Optional[str]
    old_price: float
    new_price: float
    breakdown: PriceBreakdown


@dataclass
class RecalculationResult:
    """Outcome of a bulk price recalculation"""
    total_tasks: int
    updates: List[TaskPriceUpdate] = field(default_factory=list)
    errors: int = 0
    error_details: List[Dict] = field(default_factory=list)
    calculated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class TaskPriceChange:
    """One row of a pricing impact preview"""
    sku: Optional[str]
    title: Optional[str]
    category: Optional[str]
    current_price: float
    new_price: float
    change: float
    percent_change: float


@dataclass
class PricingImpact:
    """Preview of what a settings change would do to task prices"""
    total_tasks: int
    current_average: float = 0.0
    new_average: float = 0.0
    average_change: float = 0.0
    percent_change: float = 0.0
    tasks_with_increase: int = 0
    tasks_with_decrease: int = 0
    tasks_unchanged: int = 0
    price_changes: List[TaskPriceChange] = field(default_factory=list)
    category_analysis: Dict[str, Dict[str, float]] = field(default_factory=dict)
    settings_changes: Dict[str, float] = field(default_factory=dict)


# ============== Core Formula ==============

def round_currency(value: float) -> float:
    """Round to cents, halves go up (multiply by 100, round, divide)"""
    return math.floor(value * 100 + 0.5) / 100


def business_multiplier(
    administrative_fee: float = DEFAULT_ADMINISTRATIVE_FEE,
    business_fee: float = DEFAULT_BUSINESS_FEE,
    consumables_fee: float = DEFAULT_CONSUMABLES_FEE
) -> float:
    """1 + the three fee fractions"""
    return administrative_fee + business_fee + consumables_fee + 1


def calculate_price(
    labor_hours: float,
    material_cost: float,
    wage: float = DEFAULT_WAGE,
    material_markup: float = DEFAULT_MATERIAL_MARKUP,
    administrative_fee: float = DEFAULT_ADMINISTRATIVE_FEE,
    business_fee: float = DEFAULT_BUSINESS_FEE,
    consumables_fee: float = DEFAULT_CONSUMABLES_FEE
) -> float:
    """
    Price a repair from labor hours and raw material cost.

    Inputs must already be sanitized numbers.
    """
    labor_cost = labor_hours * wage
    marked_up = material_cost * material_markup
    subtotal = labor_cost + marked_up
    multiplier = business_multiplier(administrative_fee, business_fee, consumables_fee)
    return round_currency(subtotal * multiplier)


def price_breakdown(
    labor_hours: float,
    material_cost: float,
    wage: float = DEFAULT_WAGE,
    material_markup: float = DEFAULT_MATERIAL_MARKUP,
    administrative_fee: float = DEFAULT_ADMINISTRATIVE_FEE,
    business_fee: float = DEFAULT_BUSINESS_FEE,
    consumables_fee: float = DEFAULT_CONSUMABLES_FEE
) -> PriceBreakdown:
    """Same formula as calculate_price, keeping every intermediate value"""
    labor_cost = labor_hours * wage
    marked_up = material_cost * material_markup
    multiplier = business_multiplier(administrative_fee, business_fee, consumables_fee)

    return PriceBreakdown(
        labor_hours=labor_hours,
        wage=wage,
        labor_cost=labor_cost,
        material_cost=material_cost,
        material_markup=material_markup,
        marked_up_materials=marked_up,
        subtotal=labor_cost + marked_up,
        administrative_fee=administrative_fee,
        business_fee=business_fee,
        consumables_fee=consumables_fee,
        business_multiplier=multiplier,
        price=calculate_price(
            labor_hours, material_cost, wage, material_markup,
            administrative_fee, business_fee, consumables_fee
        )
    )


def hourly_rate_for_skill(wage: float, skill_level: Optional[str]) -> float:
    """Base wage adjusted for jeweler skill level"""
    return wage * SkillLevel.from_name(skill_level).multiplier


# ============== Settings Helpers ==============

def sanitize_amount(value: Any) -> float:
    """Input coercion for hours/costs: non-numeric or negative -> 0"""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (ValueError, TypeError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def resolve_pricing(pricing: Optional[Mapping[str, Any]]) -> Dict[str, float]:
    """Merge a (possibly partial) pricing document over the defaults"""
    resolved = dict(DEFAULT_PRICING)
    if not pricing:
        return resolved
    for key in DEFAULT_PRICING:
        value = pricing.get(key)
        if value is None:
            continue
        try:
            resolved[key] = float(value)
        except (ValueError, TypeError):
            continue
    return resolved


def breakdown_for_task(task: Mapping[str, Any], pricing: Mapping[str, Any]) -> PriceBreakdown:
    """Price one repair task document with the given settings"""
    settings = resolve_pricing(pricing)
    return price_breakdown(
        labor_hours=sanitize_amount(task.get("laborHours")),
        material_cost=sanitize_amount(task.get("materialCost")),
        wage=settings["wage"],
        material_markup=settings["materialMarkup"],
        administrative_fee=settings["administrativeFee"],
        business_fee=settings["businessFee"],
        consumables_fee=settings["consumablesFee"],
    )


# ============== Bulk Operations ==============

def recalculate_task_prices(
    tasks: List[Mapping[str, Any]],
    pricing: Optional[Mapping[str, Any]]
) -> RecalculationResult:
    """
    Recompute the base price of every repair task.

    A task that cannot be priced is counted as an error; the others are
    still returned.
    """
    result = RecalculationResult(total_tasks=len(tasks))

    for task in tasks:
        try:
            breakdown = breakdown_for_task(task, pricing)
            result.updates.append(TaskPriceUpdate(
                task_id=task.get("id", task.get("_id")),
                sku=task.get("sku"),
                old_price=sanitize_amount(task.get("basePrice")),
                new_price=breakdown.price,
                breakdown=breakdown
            ))
        except Exception as e:
            result.errors += 1
            if len(result.error_details) < 5:
                result.error_details.append({
                    "task_id": task.get("id", task.get("_id")) if isinstance(task, Mapping) else None,
                    "sku": task.get("sku") if isinstance(task, Mapping) else None,
                    "error": str(e)
                })

    return result


def analyze_pricing_impact(
    tasks: List[Mapping[str, Any]],
    current_pricing: Optional[Mapping[str, Any]],
    proposed_pricing: Optional[Mapping[str, Any]]
) -> PricingImpact:
    """Preview price changes for every task under proposed settings."""
    impact = PricingImpact(total_tasks=len(tasks))
    category_totals: Dict[str, Dict[str, float]] = {}

    current_total = 0.0
    new_total = 0.0

    for task in tasks:
        current_price = sanitize_amount(task.get("basePrice"))
        new_price = breakdown_for_task(task, proposed_pricing).price
        change = new_price - current_price
        percent = (change / current_price * 100) if current_price > 0 else 0.0
        category = task.get("category") or "uncategorized"

        impact.price_changes.append(TaskPriceChange(
            sku=task.get("sku"),
            title=task.get("title"),
            category=category,
            current_price=current_price,
            new_price=new_price,
            change=round(change, 2),
            percent_change=round(percent, 2)
        ))

        current_total += current_price
        new_total += new_price

        bucket = category_totals.setdefault(category, {"count": 0, "current": 0.0, "new": 0.0})
        bucket["count"] += 1
        bucket["current"] += current_price
        bucket["new"] += new_price

        if change > CHANGE_TOLERANCE:
            impact.tasks_with_increase += 1
        elif change < -CHANGE_TOLERANCE:
            impact.tasks_with_decrease += 1
        else:
            impact.tasks_unchanged += 1

    if tasks:
        impact.current_average = round(current_total / len(tasks), 2)
        impact.new_average = round(new_total / len(tasks), 2)
        impact.average_change = round(impact.new_average - impact.current_average, 2)
        if impact.current_average > 0:
            impact.percent_change = round(impact.average_change / impact.current_average * 100, 2)

    for category, bucket in category_totals.items():
        current_avg = bucket["current"] / bucket["count"]
        new_avg = bucket["new"] / bucket["count"]
        impact.category_analysis[category] = {
            "count": bucket["count"],
            "current_average": round(current_avg, 2),
            "new_average": round(new_avg, 2),
            "average_change": round(new_avg - current_avg, 2)
        }

    current = resolve_pricing(current_pricing)
    proposed = resolve_pricing(proposed_pricing)
    impact.settings_changes = {
        key: round(proposed[key] - current[key], 4) for key in DEFAULT_PRICING
    }

    return impact


# ============== Serialization ==============

def to_dict(obj) -> dict:
    """Convert dataclass to dictionary for JSON serialization."""
    if hasattr(obj, '__dataclass_fields__'):
        result = {}
        for field_name in obj.__dataclass_fields__:
            value = getattr(obj, field_name)
            if isinstance(value, list):
                result[field_name] = [to_dict(item) for item in value]
            elif hasattr(value, '__dataclass_fields__'):
                result[field_name] = to_dict(value)
            elif isinstance(value, datetime):
                result[field_name] = value.isoformat()
            else:
                result[field_name] = value
        return result
    return obj
