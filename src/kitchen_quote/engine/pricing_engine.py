"""
Pricing Engine - Core quote derivation with traceability.

compute() turns one (JobParameters, PricingConfig, Options) snapshot into a
fresh ResultSet. It is a pure function: no state is kept between calls and
inputs are never modified, so back-to-back calls on the same snapshot give
identical results.

Pipeline order:
1. Hood cleaning cost (frequency discount, labor/material split)
2. Labor (supervisor reclassification on single-day jobs) and labor tax
3. Workers' compensation
4. Transport (long-contract discounts)
5. Materials and equipment
6. Base costs, operational costs, subtotal
7. Residual adjustment and markup (duration / custom / cost-optimized)
8. Holiday surcharge, general liability, initial fee, rounding
9. Cost/profit ratio, net profit, commission, company profit
"""
import math

from .models import (
    JobParameters, PricingConfig, Options, ResultSet, OperationalCosts,
    SplitCommission, TraceStep, MARKUP_CUSTOM, MARKUP_OPTIMIZED,
)


LABOR_TAX_RATE = 0.17
HOLIDAY_SURCHARGE_RATE = 0.25
TARGET_COST_PERCENTAGE = 62

BASE_MARKUP = 120
MIN_DURATION_MARKUP = 35
MARKUP_RAMP_DAYS = 29
MIN_OPTIMIZED_MARKUP = 20


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity."""
    return int(math.floor(value + 0.5))


def round_amount(amount: float, method: str = 'up', value: float = 50) -> float:
    """
    Round an amount to a multiple of ``value``.

    ``method`` is one of 'up' (ceiling), 'down' (floor) or 'nearest'.
    A zero step leaves the amount untouched.
    """
    if not value:
        return amount
    if method == 'up':
        return math.ceil(amount / value) * value
    if method == 'down':
        return math.floor(amount / value) * value
    return math.floor(amount / value + 0.5) * value


def hood_discount_factor(frequency: int) -> float:
    """Volume discount for repeated hood cleanings (0.7 floor from 5 visits)."""
    if frequency <= 1:
        return 1.0
    return 0.9 - (min(5, frequency) - 1) * 0.05


def calculate_hood_costs(params: JobParameters, config: PricingConfig) -> tuple[float, float, float]:
    """Return (hood_cost, hood_labor_cost, hood_material_cost)."""
    if params.large_hoods <= 0 and params.small_hoods <= 0:
        return 0.0, 0.0, 0.0

    hood_cost = ((params.large_hoods * config.large_hood_price)
                 + (params.small_hoods * config.small_hood_price)) * params.hood_cleaning_frequency
    if params.hood_cleaning_frequency > 1:
        hood_cost *= hood_discount_factor(params.hood_cleaning_frequency)

    hood_labor = hood_cost * (params.hood_labor_cost_perc / 100)
    hood_material = hood_cost * (params.hood_material_cost_perc / 100)
    return hood_cost, hood_labor, hood_material


def calculate_duration_markup(days: int) -> int:
    """Markup that slides from 120% on a one-day job down to 35% at 30+ days."""
    if days == 1:
        return BASE_MARKUP
    days_effect = min(1, (days - 1) / MARKUP_RAMP_DAYS)
    return round_half_up(BASE_MARKUP - (BASE_MARKUP - MIN_DURATION_MARKUP) * days_effect)


def calculate_optimized_markup(direct_costs: float, adjusted_subtotal: float) -> int:
    """Markup that brings direct costs to the target share of the sale price."""
    if adjusted_subtotal <= 0:
        return MIN_OPTIMIZED_MARKUP
    target_price = direct_costs * 100 / TARGET_COST_PERCENTAGE
    markup = round_half_up((target_price / adjusted_subtotal - 1) * 100)
    return max(MIN_OPTIMIZED_MARKUP, markup)


def calculate_markup_percentage(days: int, options: Options) -> float:
    """Markup for the custom or duration-based modes."""
    if options.markup_mode == MARKUP_CUSTOM:
        return options.custom_markup_percentage
    return calculate_duration_markup(days)


def _money(amount: float) -> str:
    return f"${amount:,.2f}"


def compute(params: JobParameters, config: PricingConfig, options: Options) -> ResultSet:
    """
    Derive the full quote for one snapshot.

    Args:
        params: Job inputs (workers, days, hoods, flags)
        config: Pay rates, hood prices and insurance rates
        options: Inclusion toggles, markup/commission policy, percentages

    Returns:
        A new ResultSet; nothing from earlier calls is reused.
    """
    trace: list[TraceStep] = []

    # 1. Hood cleaning
    hood_cost, hood_labor, hood_material = calculate_hood_costs(params, config)
    if hood_cost:
        trace.append(TraceStep(
            "Hood Cleaning",
            f"{params.large_hoods} large + {params.small_hoods} small × {params.hood_cleaning_frequency}",
            _money(hood_cost),
        ))

    # 2. Labor
    supervisors, regular_workers = 0, params.workers
    regular_labor = 0.0
    if params.workers > 0:
        if params.days == 1 and params.workers > 1:
            supervisors = 1
            regular_workers = params.workers - 1
        regular_labor = ((regular_workers * config.regular_pay_rate * params.hours * params.days)
                         + (supervisors * config.supervisor_pay_rate * params.hours * params.days))

    labor_cost = regular_labor + hood_labor
    labor_tax = labor_cost * LABOR_TAX_RATE
    trace.append(TraceStep(
        "Labor",
        f"{regular_workers} workers + {supervisors} supervisor × {params.hours} hrs × {params.days} days",
        _money(labor_cost),
    ))

    # 3. Workers' compensation
    work_comp = labor_cost * config.work_comp_rate / 100 if params.include_insurance else 0.0

    # 4. Transport
    transport = 0.0
    if options.include_transport:
        daily = (config.outside_houston_transport_cost_per_day if params.outside_houston
                 else config.transport_cost_per_day)
        transport = daily * params.days
        if params.days > 7:
            transport *= 0.8
        if params.days > 21:
            transport *= 0.7

    # 5. Materials and equipment
    materials = ((params.materials_per_day * params.days) if options.include_materials else 0.0) + hood_material
    equipment = params.equipment_per_day * params.days if options.include_equipment else 0.0

    # 6. Base and operational costs
    base_costs = labor_cost + labor_tax + work_comp + transport + materials + equipment + hood_cost
    operational = OperationalCosts(
        regular_supplies=base_costs * (options.regular_supplies_percentage / 100),
        additional_equipment=base_costs * (options.additional_equipment_percentage / 100),
        uniform_safety=base_costs * (options.uniform_safety_percentage / 100),
        communications=base_costs * (options.communications_percentage / 100),
        overhead=base_costs * (options.overhead_percentage / 100),
    )
    operational_costs = operational.total

    internal_cost_subtotal = base_costs + operational_costs
    direct_costs = internal_cost_subtotal
    subtotal = internal_cost_subtotal
    trace.append(TraceStep("Subtotal", "Base costs + operational costs", _money(subtotal)))

    # 7. Residual and markup
    residual = 0.0
    adjusted_subtotal = subtotal
    if options.enable_residual_percentage:
        residual = subtotal * (options.residual_percentage_value / 100)
        adjusted_subtotal += residual
        trace.append(TraceStep("Residual", f"{options.residual_percentage_value}% of subtotal", _money(residual)))

    is_optimization_active = options.markup_mode == MARKUP_OPTIMIZED
    if is_optimization_active:
        markup_pct = calculate_optimized_markup(direct_costs, adjusted_subtotal)
        trace.append(TraceStep("Markup", f"Optimized for {TARGET_COST_PERCENTAGE}% cost ratio", f"{markup_pct}%"))
    else:
        markup_pct = calculate_markup_percentage(params.days, options)
        reason = ("Custom markup" if options.markup_mode == MARKUP_CUSTOM
                  else f"Contract length of {params.days} days")
        trace.append(TraceStep("Markup", reason, f"{markup_pct}%"))

    markup = adjusted_subtotal * (markup_pct / 100)

    # 8. Surcharges, fees, rounding
    total_before_holiday = adjusted_subtotal + markup
    holiday = total_before_holiday * HOLIDAY_SURCHARGE_RATE if params.is_holiday else 0.0
    total_price = total_before_holiday + holiday

    general_liability = total_price * config.gl_rate / 1000 if params.include_insurance else 0.0
    initial_fee = options.initial_fee_value if options.enable_initial_fee else 0.0

    pre_rounding_total = total_price + general_liability + initial_fee
    rounding_adjustment = 0.0
    grand_total = pre_rounding_total
    if options.enable_rounding:
        rounded = round_amount(pre_rounding_total, options.rounding_method, options.rounding_value)
        rounding_adjustment = rounded - pre_rounding_total
        grand_total = rounded
        trace.append(TraceStep(
            "Rounding", f"{options.rounding_method} to {options.rounding_value:g}", _money(rounding_adjustment)
        ))
    trace.append(TraceStep("Grand Total", "Total price + liability + fees", _money(grand_total)))

    # 9. Ratios and profit
    cost_basis = params.subcontractor_cost if params.use_subcontractor else direct_costs
    cost_pct = round_half_up(cost_basis / total_price * 100) if total_price else 0
    profit_pct = 100 - cost_pct
    extra_benefit = internal_cost_subtotal - params.subcontractor_cost if params.use_subcontractor else 0.0

    net_profit = grand_total - cost_basis

    splits: tuple[SplitCommission, ...] = ()
    split_total_pct = 0.0
    if options.enable_commission_split:
        resolved = []
        for split in options.commission_splits:
            split_total_pct += split.percentage
            resolved.append(SplitCommission(split.name, split.percentage, net_profit * (split.percentage / 100)))
        splits = tuple(resolved)
        sales_commission = net_profit * (split_total_pct / 100)
    else:
        sales_commission = net_profit * (options.commission_percentage / 100)

    final_profit = net_profit - sales_commission
    trace.append(TraceStep("Net Profit", f"Cost {cost_pct}% / profit {profit_pct}%", _money(net_profit)))

    return ResultSet(
        labor_cost=labor_cost,
        regular_labor_cost=regular_labor,
        supervisors=supervisors,
        labor_tax=labor_tax,
        work_comp_cost=work_comp,
        transport_cost=transport,
        materials_cost=materials,
        equipment_cost=equipment,
        hood_cleaning_cost=hood_cost,
        hood_labor_cost=hood_labor,
        hood_material_cost=hood_material,
        base_costs=base_costs,
        operational=operational,
        operational_costs=operational_costs,
        subtotal=subtotal,
        internal_cost_subtotal=internal_cost_subtotal,
        residual_amount=residual,
        adjusted_subtotal=adjusted_subtotal,
        markup_percentage=markup_pct,
        markup=markup,
        holiday_surcharge=holiday,
        total_price=total_price,
        general_liability_cost=general_liability,
        initial_fee_amount=initial_fee,
        pre_rounding_total=pre_rounding_total,
        rounding_adjustment=rounding_adjustment,
        grand_total=grand_total,
        cost_percentage=cost_pct,
        profit_percentage=profit_pct,
        net_profit=net_profit,
        sales_commission=sales_commission,
        split_commissions=splits,
        commission_split_total_percentage=split_total_pct,
        final_company_profit=final_profit,
        extra_benefit=extra_benefit,
        is_optimization_active=is_optimization_active,
        is_target_achieved=cost_pct == TARGET_COST_PERCENTAGE,
        markup_mode=options.markup_mode,
        trace=tuple(trace),
    )
