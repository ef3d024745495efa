"""
Data models for the quote engine.

Uses dataclasses for structured, type-safe data representation.
JobParameters and Options are the mutable inputs owned by a session;
ResultSet is the frozen output of a single compute() run.
"""
from dataclasses import dataclass, field, fields, replace, asdict
from typing import Literal, Optional


RoundingMethod = Literal["up", "down", "nearest"]
MarkupMode = Literal["auto-by-duration", "custom", "cost-optimized"]

MARKUP_AUTO = "auto-by-duration"
MARKUP_CUSTOM = "custom"
MARKUP_OPTIMIZED = "cost-optimized"
MARKUP_MODES = (MARKUP_AUTO, MARKUP_CUSTOM, MARKUP_OPTIMIZED)
ROUNDING_METHODS = ("up", "down", "nearest")


@dataclass(frozen=True)
class TraceStep:
    """A single step in the pricing pipeline trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class CommissionSplit:
    """A named share of net profit paid as commission."""
    name: str
    percentage: float


@dataclass(frozen=True)
class SplitCommission:
    """A commission split resolved against net profit."""
    name: str
    percentage: float
    amount: float


@dataclass
class JobParameters:
    """Live job inputs for one quote."""
    use_subcontractor: bool = False
    subcontractor_cost: float = 0.0
    workers: int = 2
    hours: float = 4.0
    days: int = 1
    materials_per_day: float = 50.0
    equipment_per_day: float = 40.0
    large_hoods: int = 0
    small_hoods: int = 0
    hood_cleaning_frequency: int = 1
    hood_labor_cost_perc: float = 38.0    # share of hood price that is labor
    hood_material_cost_perc: float = 12.0  # share of hood price that is material
    is_holiday: bool = False
    outside_houston: bool = False
    include_insurance: bool = True

    @property
    def total_hoods(self) -> int:
        return self.large_hoods + self.small_hoods

    def copy(self) -> 'JobParameters':
        return replace(self)


@dataclass
class PricingConfig:
    """Rates used by the engine. Not part of undo/redo history."""
    regular_pay_rate: float = 16.0
    supervisor_pay_rate: float = 18.0
    transport_cost_per_day: float = 150.0
    outside_houston_transport_cost_per_day: float = 300.0
    large_hood_price: float = 650.0
    small_hood_price: float = 550.0
    work_comp_rate: float = 1.88   # $ per $100 of labor
    gl_rate: float = 7.33          # $ per $1,000 of total price

    @classmethod
    def from_rates(cls, rates: dict) -> 'PricingConfig':
        """Build a config from a rate mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: float(v) for k, v in rates.items() if k in known})

    def copy(self) -> 'PricingConfig':
        return replace(self)


def _default_splits() -> list[CommissionSplit]:
    return [CommissionSplit("Commission 1", 10.0), CommissionSplit("Commission 2", 10.0)]


@dataclass
class Options:
    """Feature toggles and percentages applied by the engine."""
    include_transport: bool = True
    include_materials: bool = True
    include_equipment: bool = True

    enable_rounding: bool = True
    rounding_method: RoundingMethod = "up"
    rounding_value: float = 50.0

    markup_mode: MarkupMode = MARKUP_AUTO
    custom_markup_percentage: float = 120.0

    commission_percentage: float = 20.0
    enable_commission_split: bool = False
    commission_splits: list[CommissionSplit] = field(default_factory=_default_splits)

    # Operational costs, as % of base costs
    regular_supplies_percentage: float = 6.0
    additional_equipment_percentage: float = 2.75
    uniform_safety_percentage: float = 2.5
    communications_percentage: float = 1.0
    overhead_percentage: float = 5.0

    enable_initial_fee: bool = False
    initial_fee_value: float = 150.0

    enable_residual_percentage: bool = False
    residual_percentage_value: float = 10.0

    def copy(self) -> 'Options':
        # Splits are frozen, so a new list is enough
        return replace(self, commission_splits=list(self.commission_splits))


@dataclass(frozen=True)
class OperationalCosts:
    """The five operational cost lines derived from base costs."""
    regular_supplies: float = 0.0
    additional_equipment: float = 0.0
    uniform_safety: float = 0.0
    communications: float = 0.0
    overhead: float = 0.0

    @property
    def total(self) -> float:
        return (self.regular_supplies + self.additional_equipment
                + self.uniform_safety + self.communications + self.overhead)


@dataclass(frozen=True)
class ResultSet:
    """Complete, immutable result of one pricing computation."""
    # Cost lines
    labor_cost: float
    regular_labor_cost: float
    supervisors: int
    labor_tax: float
    work_comp_cost: float
    transport_cost: float
    materials_cost: float
    equipment_cost: float
    hood_cleaning_cost: float
    hood_labor_cost: float
    hood_material_cost: float
    base_costs: float
    operational: OperationalCosts
    operational_costs: float
    subtotal: float
    internal_cost_subtotal: float

    # Price build-up
    residual_amount: float
    adjusted_subtotal: float
    markup_percentage: float
    markup: float
    holiday_surcharge: float
    total_price: float
    general_liability_cost: float
    initial_fee_amount: float
    pre_rounding_total: float
    rounding_adjustment: float
    grand_total: float

    # Profit
    cost_percentage: int
    profit_percentage: int
    net_profit: float
    sales_commission: float
    split_commissions: tuple[SplitCommission, ...]
    commission_split_total_percentage: float
    final_company_profit: float
    extra_benefit: float

    # Flags
    is_optimization_active: bool
    is_target_achieved: bool
    markup_mode: str

    trace: tuple[TraceStep, ...] = ()

    def get_trace_text(self) -> str:
        """Get human-readable pipeline trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Plain dict of every field (trace included) for JSON/export."""
        data = asdict(self)
        data['operational_costs_detail'] = data.pop('operational')
        return data
