"""
Quote Summary - structured and printable views of a computed quote.

This is the hand-off point to whatever renders the quote (print view,
PDF, spreadsheet). It reads a ResultSet plus the inputs that produced it
and never changes either.
"""
import io
import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from ..engine.models import JobParameters, PricingConfig, Options, ResultSet, MARKUP_CUSTOM
from ..engine.pricing_engine import TARGET_COST_PERCENTAGE
from ..exceptions import ExportError, NoResultError

logger = logging.getLogger(__name__)

REFERENCE_COST_NOTE = "Reference cost used for final price calculation"


def format_currency(amount: float) -> str:
    """Format a number as USD currency, e.g. $1,234.56."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


@dataclass
class SummaryLine:
    """One printable row of the quote."""
    section: str
    label: str
    amount: float
    details: str = ""

    @property
    def formatted(self) -> str:
        return format_currency(self.amount)


def _labor_details(params: JobParameters, config: PricingConfig) -> str:
    details = ""
    if params.workers > 0:
        if params.days == 1 and params.workers > 1:
            details = (f"{params.workers - 1} workers at {format_currency(config.regular_pay_rate)}/hr × {params.hours:g} hrs; "
                       f"1 supervisor at {format_currency(config.supervisor_pay_rate)}/hr × {params.hours:g} hrs")
        else:
            details = (f"{params.workers} workers at {format_currency(config.regular_pay_rate)}/hr × "
                       f"{params.hours:g} hrs × {params.days} days")
        if params.total_hoods:
            details += "; plus hood cleaning labor costs"
    elif params.total_hoods:
        details = "Labor costs for hood cleaning only"
    return details


def _transport_details(params: JobParameters, config: PricingConfig, options: Options) -> str:
    if not options.include_transport:
        return "Transport cost excluded"
    rate = (config.outside_houston_transport_cost_per_day if params.outside_houston
            else config.transport_cost_per_day)
    details = f"{format_currency(rate)} per day × {params.days} days"
    if params.days > 7:
        details += " (with long-term contract discount)"
    if params.outside_houston:
        details += " - Outside Houston rate"
    return details


def _hood_details(params: JobParameters, config: PricingConfig) -> str:
    parts = []
    if params.large_hoods:
        parts.append(f"{params.large_hoods} large hoods at {format_currency(config.large_hood_price)} each")
    if params.small_hoods:
        parts.append(f"{params.small_hoods} small hoods at {format_currency(config.small_hood_price)} each")
    if params.hood_cleaning_frequency > 1:
        parts.append(f"Frequency: {params.hood_cleaning_frequency} times (with discount)")
    if params.total_hoods:
        parts.append(f"Labor: {params.hood_labor_cost_perc:g}%, Materials: {params.hood_material_cost_perc:g}% of price")
    return "; ".join(parts)


def rounding_detail(method: str, value: float) -> str:
    step = format_currency(value)
    if method == 'down':
        return f"Grand total rounded down to the previous multiple of {step}"
    if method == 'nearest':
        return f"Grand total rounded to the nearest multiple of {step}"
    return f"Grand total rounded up to the next multiple of {step}"


def _markup_details(result: ResultSet, params: JobParameters) -> str:
    if result.is_optimization_active:
        return f"Automatically optimized for {TARGET_COST_PERCENTAGE}% cost ratio"
    if result.markup_mode == MARKUP_CUSTOM:
        return "Using custom markup percentage"
    return f"Calculated based on contract length of {params.days} days"


def build_lines(params: JobParameters, config: PricingConfig, options: Options,
                result: ResultSet) -> list[SummaryLine]:
    """Every visible row of the quote, in display order."""
    lines: list[SummaryLine] = []
    sub = params.use_subcontractor

    def cost(label, amount, details):
        lines.append(SummaryLine("Costs", label, amount, REFERENCE_COST_NOTE if sub else details))

    cost("Labor", result.labor_cost, _labor_details(params, config))
    cost("Labor Tax", result.labor_tax, "17% mandatory employment taxes on labor")
    if params.include_insurance:
        cost("Workers' Compensation", result.work_comp_cost,
             f"${config.work_comp_rate:g} per $100 of labor cost")
    cost("Transport", result.transport_cost, _transport_details(params, config, options))
    materials = (f"{format_currency(params.materials_per_day)} per day × {params.days} days"
                 if options.include_materials else "Materials cost excluded")
    cost("Materials", result.materials_cost, materials)
    equipment = (f"{format_currency(params.equipment_per_day)} per day × {params.days} days"
                 if options.include_equipment else "Equipment cost excluded")
    cost("Equipment", result.equipment_cost, equipment)
    if result.hood_cleaning_cost:
        cost("Hood Cleaning", result.hood_cleaning_cost, _hood_details(params, config))

    lines.append(SummaryLine("Costs", "Operational Costs", result.operational_costs,
                             "Supplies, equipment, uniforms, communications, overhead"))
    lines.append(SummaryLine("Costs", "Subtotal", result.subtotal))
    if sub:
        lines.append(SummaryLine("Costs", "Subcontractor Cost", params.subcontractor_cost))
        lines.append(SummaryLine("Costs", "Subcontractor Savings", result.extra_benefit,
                                 "Difference between internal costs and subcontractor cost"))

    if options.enable_residual_percentage:
        lines.append(SummaryLine("Price", "Residual", result.residual_amount,
                                 f"{options.residual_percentage_value:g}% of subtotal"))
    lines.append(SummaryLine("Price", f"Markup ({result.markup_percentage:g}%)", result.markup,
                             _markup_details(result, params)))
    if params.is_holiday:
        lines.append(SummaryLine("Price", "Holiday Surcharge", result.holiday_surcharge, "25% holiday rate"))
    lines.append(SummaryLine("Price", "Total Price", result.total_price))
    if params.include_insurance:
        lines.append(SummaryLine("Price", "General Liability", result.general_liability_cost,
                                 f"${config.gl_rate:g} per $1,000 of total price"))
    if options.enable_initial_fee:
        lines.append(SummaryLine("Price", "Initial Fee", result.initial_fee_amount))
    if options.enable_rounding:
        lines.append(SummaryLine("Price", "Rounding Adjustment", result.rounding_adjustment,
                                 rounding_detail(options.rounding_method, options.rounding_value)))
    lines.append(SummaryLine("Price", "Grand Total", result.grand_total))

    lines.append(SummaryLine("Profit", "Net Profit", result.net_profit))
    if options.enable_commission_split:
        for split in result.split_commissions:
            lines.append(SummaryLine("Profit", f"{split.name} ({split.percentage:g}%)", split.amount))
        lines.append(SummaryLine("Profit", f"Total Commission ({result.commission_split_total_percentage:g}%)",
                                 result.sales_commission))
    else:
        lines.append(SummaryLine("Profit", f"Sales Commission ({options.commission_percentage:g}%)",
                                 result.sales_commission))
    lines.append(SummaryLine("Profit", "Final Company Profit", result.final_company_profit))
    return lines


def build_summary(params: JobParameters, config: PricingConfig, options: Options,
                  result: ResultSet, generated_at: Optional[datetime] = None) -> dict:
    """Structured quote summary for an external renderer."""
    generated_at = generated_at or datetime.now()
    return {
        "generated_at": generated_at.isoformat(timespec='seconds'),
        "job": asdict(params),
        "lines": [asdict(line) | {"formatted": line.formatted}
                  for line in build_lines(params, config, options, result)],
        "grand_total": result.grand_total,
        "cost_percentage": result.cost_percentage,
        "profit_percentage": result.profit_percentage,
        "is_target_achieved": result.is_target_achieved,
        "is_optimization_active": result.is_optimization_active,
    }


def session_summary(session, generated_at: Optional[datetime] = None) -> dict:
    """build_summary() for the live state of a QuoteSession."""
    if session.result is None:
        raise NoResultError("No quote has been calculated yet. Check the inputs and try again.")
    return build_summary(session.params, session.config, session.options, session.result, generated_at)


def summary_text(summary: dict) -> str:
    """Printable plain-text quote."""
    out = [f"KITCHEN CLEANING QUOTE  ({summary['generated_at'][:10]})", "=" * 60]
    section = None
    for line in summary["lines"]:
        if line["section"] != section:
            section = line["section"]
            out.append("")
            out.append(section.upper())
        out.append(f"  {line['label']:<36}{line['formatted']:>20}")
        if line["details"]:
            out.append(f"    {line['details']}")
    out.append("")
    out.append(f"Cost {summary['cost_percentage']}% / Profit {summary['profit_percentage']}%")
    return "\n".join(out)


def summary_to_frame(summary: dict) -> pd.DataFrame:
    """Quote rows as a DataFrame (Section, Item, Amount, Details)."""
    return pd.DataFrame([{
        'Section': line['section'],
        'Item': line['label'],
        'Amount': round(line['amount'], 2),
        'Details': line['details'],
    } for line in summary["lines"]], columns=['Section', 'Item', 'Amount', 'Details'])


def export_csv(summary: dict, path: Optional[Union[str, Path]] = None) -> str:
    """CSV text of the quote; also written to ``path`` when given."""
    df = summary_to_frame(summary)
    text = df.to_csv(index=False)
    if path is not None:
        try:
            Path(path).write_text(text, encoding='utf-8')
        except OSError as e:
            logger.warning("CSV export to %s failed: %s", path, e)
            raise ExportError(f"Could not write CSV export: {e}") from e
    return text


def export_excel(summary: dict, path: Optional[Union[str, Path]] = None) -> bytes:
    """Excel workbook of the quote (openpyxl); also written to ``path`` when given."""
    buffer = io.BytesIO()
    try:
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            summary_to_frame(summary).to_excel(writer, sheet_name='Quote', index=False)
            pd.DataFrame([summary["job"]]).to_excel(writer, sheet_name='Job', index=False)
    except ImportError as e:
        raise ExportError(f"Excel export unavailable: {e}") from e

    data = buffer.getvalue()
    if path is not None:
        try:
            Path(path).write_bytes(data)
        except OSError as e:
            logger.warning("Excel export to %s failed: %s", path, e)
            raise ExportError(f"Could not write Excel export: {e}") from e
    return data
