import pytest

from app.services.pricing import (
    DEFAULT_PRICING,
    analyze_pricing_impact,
    breakdown_for_task,
    business_multiplier,
    calculate_price,
    hourly_rate_for_skill,
    price_breakdown,
    recalculate_task_prices,
    resolve_pricing,
    round_currency,
    sanitize_amount,
    to_dict,
)


def test_reference_price():
    assert calculate_price(2, 25, 45, 1.5, 0.15, 0.25, 0.08) == 188.70


def test_reference_breakdown():
    breakdown = price_breakdown(2, 25)
    assert breakdown.labor_cost == 90
    assert breakdown.marked_up_materials == 37.5
    assert breakdown.subtotal == 127.5
    assert breakdown.business_multiplier == pytest.approx(1.48)
    assert breakdown.price == 188.70
    assert breakdown.formula == "v2.0_business_formula"


@pytest.mark.parametrize("fees", [(0, 0, 0), (0.15, 0.25, 0.08), (1, 1, 1)])
def test_zero_inputs_price_to_zero(fees):
    assert calculate_price(0, 0, 80, 3.0, *fees) == 0.0


def test_default_multiplier():
    assert business_multiplier() == pytest.approx(1.48)


def test_rounding_goes_half_up_on_cents():
    assert round_currency(1.005 + 1e-9) == 1.01
    assert round_currency(2.675 + 1e-9) == 2.68
    assert round_currency(10.0) == 10.0


def test_sanitize_amount_treats_bad_input_as_zero():
    assert sanitize_amount("3.5") == 3.5
    assert sanitize_amount(-2) == 0.0
    assert sanitize_amount("abc") == 0.0
    assert sanitize_amount(None) == 0.0
    assert sanitize_amount(float("nan")) == 0.0


def test_resolve_pricing_merges_partial_settings_over_defaults():
    resolved = resolve_pricing({"wage": "60", "businessFee": None, "bogus": 1})
    assert resolved["wage"] == 60.0
    assert resolved["businessFee"] == DEFAULT_PRICING["businessFee"]
    assert "bogus" not in resolved
    assert resolve_pricing(None) == DEFAULT_PRICING


def test_skill_level_scales_wage():
    assert hourly_rate_for_skill(40, "expert") == 60
    assert hourly_rate_for_skill(40, "basic") == 30
    assert hourly_rate_for_skill(40, "unheard-of") == 40


def test_breakdown_for_task_sanitizes_task_fields():
    breakdown = breakdown_for_task({"laborHours": "1", "materialCost": None}, DEFAULT_PRICING)
    assert breakdown.price == calculate_price(1, 0)


def test_recalculate_collects_updates_and_errors():
    tasks = [
        {"id": "a", "sku": "A", "laborHours": 2, "materialCost": 25, "basePrice": 150},
        {"id": "b", "sku": "B", "laborHours": 1, "materialCost": 0, "basePrice": 66.6},
        "not a task",
    ]
    result = recalculate_task_prices(tasks, {"wage": 45})

    assert result.total_tasks == 3
    assert [u.task_id for u in result.updates] == ["a", "b"]
    assert result.updates[0].old_price == 150
    assert result.updates[0].new_price == 188.70
    assert result.errors == 1
    assert result.error_details[0]["task_id"] is None


def test_impact_counts_increases_decreases_and_unchanged():
    tasks = [
        {"sku": "A", "category": "rings", "laborHours": 2, "materialCost": 25, "basePrice": 188.70},
        {"sku": "B", "category": "rings", "laborHours": 1, "materialCost": 0, "basePrice": 100},
        {"sku": "C", "category": "chains", "laborHours": 1, "materialCost": 0, "basePrice": 10},
    ]
    proposed = dict(DEFAULT_PRICING)

    impact = analyze_pricing_impact(tasks, DEFAULT_PRICING, proposed)

    assert impact.total_tasks == 3
    assert impact.tasks_unchanged == 1
    assert impact.tasks_with_decrease == 1
    assert impact.tasks_with_increase == 1
    assert set(impact.category_analysis) == {"rings", "chains"}
    assert impact.category_analysis["rings"]["count"] == 2
    assert all(change == 0 for change in impact.settings_changes.values())


def test_impact_reports_settings_deltas():
    impact = analyze_pricing_impact([], DEFAULT_PRICING, {**DEFAULT_PRICING, "wage": 50})
    assert impact.settings_changes["wage"] == 5
    assert impact.current_average == 0.0
    assert impact.new_average == 0.0


def test_to_dict_serializes_nested_results():
    result = recalculate_task_prices([{"id": "a", "laborHours": 1}], None)
    payload = to_dict(result)
    assert payload["updates"][0]["breakdown"]["price"] == calculate_price(1, 0)
    assert isinstance(payload["calculated_at"], str)
