"""
Pricing engine tests: pipeline stages, markup modes and known scenarios.
"""
import math
from dataclasses import replace

import pytest

from kitchen_quote.engine.models import (
    JobParameters, Options, CommissionSplit, MARKUP_CUSTOM, MARKUP_OPTIMIZED,
)
from kitchen_quote.engine.pricing_engine import (
    compute, round_amount, round_half_up, hood_discount_factor,
    calculate_duration_markup, calculate_optimized_markup,
)


def test_default_job_totals(params, config, options):
    """Default two-worker single-day job prices out to $1,050."""
    result = compute(params, config, options)

    assert result.labor_cost == pytest.approx(136.0)
    assert result.work_comp_cost == pytest.approx(2.5568)
    assert result.base_costs == pytest.approx(401.6768)
    assert result.operational_costs == pytest.approx(401.6768 * 0.1725)
    assert result.subtotal == pytest.approx(470.966048)
    assert result.markup_percentage == 120
    assert result.total_price == pytest.approx(1036.1253056)
    assert result.grand_total == 1050
    assert result.rounding_adjustment == pytest.approx(1050 - result.pre_rounding_total)
    assert result.cost_percentage == 45
    assert result.profit_percentage == 55
    assert result.sales_commission == pytest.approx(result.net_profit * 0.2)
    assert result.final_company_profit == pytest.approx(result.net_profit * 0.8)


def test_supervisor_on_single_day_job(config, options):
    """Scenario A: one of two workers is paid the supervisor rate."""
    params = JobParameters(workers=2, hours=4, days=1)
    result = compute(params, config, options)

    assert result.supervisors == 1
    assert result.labor_cost == pytest.approx(1 * 16 * 4 + 1 * 18 * 4)
    assert result.labor_cost == pytest.approx(136)
    assert result.labor_tax == pytest.approx(23.12)


def test_no_supervisor_on_multi_day_job(config, options):
    params = JobParameters(workers=2, hours=4, days=2)
    result = compute(params, config, options)

    assert result.supervisors == 0
    assert result.labor_cost == pytest.approx(2 * 16 * 4 * 2)


def test_single_worker_is_never_supervisor(config, options):
    result = compute(JobParameters(workers=1, hours=8, days=1), config, options)
    assert result.supervisors == 0
    assert result.labor_cost == pytest.approx(128)


def test_single_hood_no_discount(config, options):
    """Scenario B: one large hood at frequency 1 costs list price."""
    params = JobParameters(large_hoods=1, small_hoods=0, hood_cleaning_frequency=1)
    result = compute(params, config, options)

    assert result.hood_cleaning_cost == pytest.approx(650)
    assert result.hood_labor_cost == pytest.approx(650 * 0.38)
    assert result.hood_material_cost == pytest.approx(650 * 0.12)


def test_hood_frequency_discount(config, options):
    """Scenario C: two large hoods three times get a 20% discount."""
    params = JobParameters(large_hoods=2, hood_cleaning_frequency=3)
    result = compute(params, config, options)

    assert result.hood_cleaning_cost == pytest.approx(3120)


def test_hood_discount_floor():
    assert hood_discount_factor(1) == 1.0
    assert hood_discount_factor(2) == pytest.approx(0.85)
    assert hood_discount_factor(5) == pytest.approx(0.7)
    assert hood_discount_factor(12) == pytest.approx(0.7)


def test_hood_costs_feed_labor_and_materials(config, options):
    base = compute(JobParameters(), config, options)
    with_hood = compute(JobParameters(small_hoods=1), config, options)

    assert with_hood.labor_cost == pytest.approx(base.labor_cost + 550 * 0.38)
    assert with_hood.materials_cost == pytest.approx(base.materials_cost + 550 * 0.12)


def test_hood_only_job(config, options):
    """Zero workers with hoods: labor is hood labor only."""
    result = compute(JobParameters(workers=0, large_hoods=1), config, options)
    assert result.regular_labor_cost == 0
    assert result.labor_cost == pytest.approx(650 * 0.38)


@pytest.mark.parametrize("days,expected", [
    (1, 150),
    (7, 150 * 7),
    (10, 150 * 10 * 0.8),
    (25, 150 * 25 * 0.8 * 0.7),
])
def test_transport_long_contract_discounts(config, options, days, expected):
    result = compute(JobParameters(days=days), config, options)
    assert result.transport_cost == pytest.approx(expected)


def test_transport_outside_houston_and_excluded(config, options):
    outside = compute(JobParameters(outside_houston=True), config, options)
    assert outside.transport_cost == pytest.approx(300)

    excluded = compute(JobParameters(), config, replace(options, include_transport=False))
    assert excluded.transport_cost == 0


def test_materials_and_equipment_exclusion(config, options):
    opts = replace(options, include_materials=False, include_equipment=False)
    result = compute(JobParameters(large_hoods=1), config, opts)

    # Hood materials stay even when daily materials are excluded
    assert result.materials_cost == pytest.approx(650 * 0.12)
    assert result.equipment_cost == 0


def test_insurance_toggle(config, options):
    result = compute(JobParameters(include_insurance=False), config, options)
    assert result.work_comp_cost == 0
    assert result.general_liability_cost == 0

    insured = compute(JobParameters(), config, options)
    assert insured.general_liability_cost == pytest.approx(insured.total_price * 7.33 / 1000)


def test_duration_markup():
    """Scenario D: markup bottoms out at 35% from 30 days."""
    assert calculate_duration_markup(1) == 120
    assert calculate_duration_markup(15) == 79
    assert calculate_duration_markup(30) == 35
    assert calculate_duration_markup(60) == 35


def test_thirty_day_job_uses_minimum_markup(config, options):
    result = compute(JobParameters(days=30), config, options)
    assert result.markup_percentage == 35


def test_custom_markup(params, config, options):
    opts = replace(options, markup_mode=MARKUP_CUSTOM, custom_markup_percentage=50)
    result = compute(params, config, opts)

    assert result.markup_percentage == 50
    assert result.markup == pytest.approx(result.adjusted_subtotal * 0.5)
    assert not result.is_optimization_active


def test_cost_optimized_markup_hits_target(params, config, options):
    opts = replace(options, markup_mode=MARKUP_OPTIMIZED)
    result = compute(params, config, opts)

    assert result.is_optimization_active
    assert result.markup_percentage == 61
    assert result.cost_percentage == 62
    assert result.is_target_achieved


def test_cost_optimized_markup_with_residual(params, config, options):
    opts = replace(options, markup_mode=MARKUP_OPTIMIZED,
                   enable_residual_percentage=True, residual_percentage_value=10)
    result = compute(params, config, opts)

    assert result.residual_amount == pytest.approx(result.subtotal * 0.1)
    assert result.adjusted_subtotal == pytest.approx(result.subtotal * 1.1)
    assert result.markup_percentage == 47


def test_cost_optimized_markup_floor():
    assert calculate_optimized_markup(100, 1000) == 20
    assert calculate_optimized_markup(0, 0) == 20


def test_holiday_surcharge(params, config, options):
    result = compute(replace(params, is_holiday=True), config, options)
    before = result.adjusted_subtotal + result.markup

    assert result.holiday_surcharge == pytest.approx(before * 0.25)
    assert result.total_price == pytest.approx(before * 1.25)


def test_initial_fee(params, config, options):
    opts = replace(options, enable_initial_fee=True, initial_fee_value=150, enable_rounding=False)
    result = compute(params, config, opts)

    assert result.initial_fee_amount == 150
    assert result.grand_total == pytest.approx(result.total_price + result.general_liability_cost + 150)


def test_round_amount_methods():
    assert round_amount(1032, 'up', 50) == 1050
    assert round_amount(1032, 'down', 50) == 1000
    assert round_amount(1032, 'nearest', 50) == 1050
    assert round_amount(1024, 'nearest', 50) == 1000
    assert round_amount(1025, 'nearest', 50) == 1050
    assert round_amount(1032, 'up', 0) == 1032
    assert round_amount(1050, 'up', 50) == 1050


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(61.29) == 61
    assert round_half_up(-0.5) == 0


def test_rounding_adjustment(zero_job, config):
    """Scenario E: $1,032 before rounding becomes $1,050."""
    params, options = zero_job
    opts = replace(options, enable_initial_fee=True, initial_fee_value=1032)
    result = compute(params, config, opts)

    assert result.pre_rounding_total == 1032
    assert result.grand_total == 1050
    assert result.rounding_adjustment == 18


def test_rounding_disabled(params, config, options):
    result = compute(params, config, replace(options, enable_rounding=False))
    assert result.rounding_adjustment == 0
    assert result.grand_total == result.pre_rounding_total


def test_zero_total_price_defines_cost_percentage(zero_job, config):
    """Scenario F: an all-zero job reports 0% cost, never NaN."""
    params, options = zero_job
    result = compute(params, config, options)

    assert result.total_price == 0
    assert result.cost_percentage == 0
    assert result.profit_percentage == 100
    assert not math.isnan(result.net_profit)

    optimized = compute(params, config, replace(options, markup_mode=MARKUP_OPTIMIZED))
    assert optimized.cost_percentage == 0
    assert optimized.markup_percentage == 20


def test_subcontractor_mode(config, options):
    params = JobParameters(use_subcontractor=True, subcontractor_cost=300)
    result = compute(params, config, options)

    assert result.net_profit == pytest.approx(result.grand_total - 300)
    assert result.extra_benefit == pytest.approx(result.internal_cost_subtotal - 300)
    assert result.cost_percentage == round(300 / result.total_price * 100)


def test_expensive_subcontractor_has_negative_benefit(config, options):
    params = JobParameters(use_subcontractor=True, subcontractor_cost=5000)
    result = compute(params, config, options)
    assert result.extra_benefit < 0


def test_commission_splits_are_not_normalized(params, config):
    splits = [CommissionSplit("Sales", 60), CommissionSplit("Manager", 60)]
    opts = Options(enable_commission_split=True, commission_splits=splits)
    result = compute(params, config, opts)

    assert result.commission_split_total_percentage == 120
    assert [s.amount for s in result.split_commissions] == pytest.approx(
        [result.net_profit * 0.6, result.net_profit * 0.6])
    assert result.sales_commission == pytest.approx(result.net_profit * 1.2)
    assert result.final_company_profit < 0


def test_single_commission_has_no_splits(params, config, options):
    result = compute(params, config, options)
    assert result.split_commissions == ()


def test_compute_is_deterministic(config, options):
    params = JobParameters(workers=3, days=9, large_hoods=1, small_hoods=2,
                           hood_cleaning_frequency=4, is_holiday=True)
    first = compute(params, config, options)
    second = compute(params, config, options)

    assert first == second
    assert first.to_dict() == second.to_dict()


def test_compute_does_not_modify_inputs(params, config, options):
    before = (params.copy(), config.copy(), options.copy())
    compute(params, config, options)
    assert (params, config, options) == before


def test_trace_lists_pipeline_steps(params, config, options):
    result = compute(params, config, options)
    steps = [t.step for t in result.trace]

    assert steps[0] == "Labor"
    assert "Markup" in steps
    assert "Grand Total" in result.get_trace_text()
