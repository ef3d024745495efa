"""
Quote Session - the configuration/input model for one quote.

Owns the live JobParameters, Options and PricingConfig, the undo/redo
history and the latest ResultSet. Every change goes through mutate(),
which applies the change to working copies, enforces the field bounds and
the workers/hoods invariant, recomputes, and only then commits the copies,
pushes a history snapshot and replaces the result.
"""
import logging
import math
from dataclasses import dataclass, fields
from typing import Any, Callable, Optional

from ..config.settings import Settings, get_settings
from ..engine.history import HistoryManager, HistorySnapshot
from ..engine.models import (
    JobParameters, PricingConfig, Options, ResultSet, CommissionSplit,
    MARKUP_MODES, ROUNDING_METHODS,
)
from ..engine.pricing_engine import compute
from ..exceptions import UnknownFieldError

logger = logging.getLogger(__name__)

Change = Callable[[JobParameters, Options, PricingConfig], None]


@dataclass(frozen=True)
class FieldSpec:
    """Where a settable field lives and how its value is coerced."""
    target: str  # "params" or "options"
    kind: type | tuple = float
    minimum: Optional[float] = None
    maximum: Optional[float] = None


FIELD_SPECS: dict[str, FieldSpec] = {
    # Job parameters
    'use_subcontractor': FieldSpec('params', bool),
    'subcontractor_cost': FieldSpec('params', float, 0),
    'workers': FieldSpec('params', int, 0),
    'hours': FieldSpec('params', float, 1),
    'days': FieldSpec('params', int, 1),
    'materials_per_day': FieldSpec('params', float, 0),
    'equipment_per_day': FieldSpec('params', float, 0),
    'large_hoods': FieldSpec('params', int, 0),
    'small_hoods': FieldSpec('params', int, 0),
    'hood_cleaning_frequency': FieldSpec('params', int, 1),
    'hood_labor_cost_perc': FieldSpec('params', float, 0, 100),
    'hood_material_cost_perc': FieldSpec('params', float, 0, 100),
    'is_holiday': FieldSpec('params', bool),
    'outside_houston': FieldSpec('params', bool),
    'include_insurance': FieldSpec('params', bool),

    # Options
    'include_transport': FieldSpec('options', bool),
    'include_materials': FieldSpec('options', bool),
    'include_equipment': FieldSpec('options', bool),
    'enable_rounding': FieldSpec('options', bool),
    'rounding_method': FieldSpec('options', ROUNDING_METHODS),
    'rounding_value': FieldSpec('options', float, 0),
    'markup_mode': FieldSpec('options', MARKUP_MODES),
    'custom_markup_percentage': FieldSpec('options', float, 20),
    'commission_percentage': FieldSpec('options', float, 0, 100),
    'enable_commission_split': FieldSpec('options', bool),
    'commission_splits': FieldSpec('options', list),
    'regular_supplies_percentage': FieldSpec('options', float, 0, 100),
    'additional_equipment_percentage': FieldSpec('options', float, 0, 100),
    'uniform_safety_percentage': FieldSpec('options', float, 0, 100),
    'communications_percentage': FieldSpec('options', float, 0, 100),
    'overhead_percentage': FieldSpec('options', float, 0, 100),
    'enable_initial_fee': FieldSpec('options', bool),
    'initial_fee_value': FieldSpec('options', float, 0),
    'enable_residual_percentage': FieldSpec('options', bool),
    'residual_percentage_value': FieldSpec('options', float, 0, 100),
}

RATE_FIELDS = tuple(f.name for f in fields(PricingConfig))

TRUE_STRINGS = ('true', '1', 'yes', 'on')


def parse_bool(value: Any) -> bool:
    """Parse a boolean from a form/JSON value."""
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


class QuoteSession:
    """Single live quote: inputs, history and the latest result."""

    def __init__(
        self,
        config: Optional[PricingConfig] = None,
        settings: Optional[Settings] = None,
        params: Optional[JobParameters] = None,
        options: Optional[Options] = None,
    ):
        self.settings = settings or get_settings()
        self.config = config or PricingConfig.from_rates(self.settings.default_rates)
        self.params = params or JobParameters()
        self.options = options or Options()
        self.history = HistoryManager(self.settings.history_capacity)
        self.result: Optional[ResultSet] = None
        self.warnings: list[str] = []

        # Initial snapshot so the first edit can be undone
        self.mutate(lambda p, o, c: None)

    # ------------------------------------------------------------------
    # Transaction
    # ------------------------------------------------------------------

    def mutate(self, change: Change, record_history: bool = True) -> Optional[ResultSet]:
        """
        Apply a change and recompute as one unit.

        The change receives working copies of params, options and config.
        On success the copies become live, a snapshot is pushed (unless
        record_history is False) and the new result is returned. If the
        computation raises, the error is logged and reported as a warning
        and the live state, history and previous result are left as they were.
        """
        params, options, config = self.params.copy(), self.options.copy(), self.config.copy()
        change(params, options, config)
        self._enforce_workers_with_hoods(params)

        result = self._compute(params, options, config)
        if result is None:
            return None

        self.params, self.options, self.config = params, options, config
        if record_history:
            self.history.push(HistorySnapshot.capture(params, options))
        self.result = result
        return result

    def recompute(self) -> Optional[ResultSet]:
        """Recompute against the live inputs without touching history."""
        return self.mutate(lambda p, o, c: None, record_history=False)

    def _compute(self, params: JobParameters, options: Options, config: PricingConfig) -> Optional[ResultSet]:
        try:
            return compute(params, config, options)
        except Exception as e:
            logger.exception("Quote calculation failed")
            self.warnings.append(f"There was an error during calculation: {e}")
            return None

    # ------------------------------------------------------------------
    # Field setters
    # ------------------------------------------------------------------

    def set_field(self, name: str, value: Any) -> Optional[ResultSet]:
        """
        Set one declared JobParameters/Options field and recompute.

        Values are coerced and clamped to the field's bounds; clamping is
        reported as a warning rather than raised. Setting a field to its
        current value still recomputes and records history.
        """
        return self.update(**{name: value})

    def update(self, **values: Any) -> Optional[ResultSet]:
        """
        Set several fields as one change.

        Every value is coerced first, then all of them are applied together,
        so the workers/hoods rule only sees the final inputs. One recompute,
        one history entry. Rejected choices are skipped with a warning.
        """
        for name in values:
            if name not in FIELD_SPECS:
                raise UnknownFieldError(name)

        assignments = {}
        for name, value in values.items():
            spec = FIELD_SPECS[name]
            if name == 'commission_splits':
                coerced = self._parse_splits(value)
            else:
                coerced = self._coerce(name, spec, value)
            if coerced is not None:
                assignments[name] = (spec.target, coerced)

        if not assignments:
            # Nothing usable; still recompute like any input event
            return self.recompute()

        def change(params, options, config):
            for name, (target, coerced) in assignments.items():
                setattr(params if target == 'params' else options, name, coerced)

        return self.mutate(change)

    def _coerce(self, name: str, spec: FieldSpec, value: Any) -> Any:
        if spec.kind is bool:
            return parse_bool(value)

        if isinstance(spec.kind, tuple):
            choice = str(value).strip().lower()
            if choice not in spec.kind:
                self._warn(f"{name} must be one of {', '.join(spec.kind)}; got {value!r}")
                return None
            return choice

        return self._clamp_number(name, value, spec.kind, spec.minimum, spec.maximum)

    def _clamp_number(self, name: str, value: Any, kind: type,
                      minimum: Optional[float], maximum: Optional[float]) -> float:
        floor = minimum if minimum is not None else 0
        try:
            number = float(value)
        except (TypeError, ValueError):
            self._warn(f"{name}: please enter a valid number, using {floor:g}")
            number = floor
        else:
            if not math.isfinite(number):
                self._warn(f"{name}: please enter a valid number, using {floor:g}")
                number = floor

        if minimum is not None and number < minimum:
            self._warn(f"{name}: minimum value is {minimum:g}")
            number = minimum
        if maximum is not None and number > maximum:
            self._warn(f"{name}: maximum value is {maximum:g}")
            number = maximum
        return int(number) if kind is int else number

    def _enforce_workers_with_hoods(self, params: JobParameters) -> None:
        if params.workers == 0 and params.total_hoods == 0:
            self._warn("You must have at least one worker or one hood to clean.")
            params.workers = 1

    def _warn(self, message: str) -> None:
        logger.info("Input corrected: %s", message)
        self.warnings.append(message)

    def pop_warnings(self) -> list[str]:
        """Return and clear pending warnings."""
        pending, self.warnings = self.warnings, []
        return pending

    # ------------------------------------------------------------------
    # Commission splits
    # ------------------------------------------------------------------

    def set_commission_splits(self, splits: list) -> Optional[ResultSet]:
        """Replace all splits. Accepts numbers, dicts or CommissionSplit items."""
        return self.update(commission_splits=splits)

    def _parse_splits(self, splits: list) -> Optional[list[CommissionSplit]]:
        parsed = []
        for i, item in enumerate(splits or []):
            if isinstance(item, CommissionSplit):
                name, pct = item.name, item.percentage
            elif isinstance(item, dict):
                name = item.get('name') or f"Commission {i + 1}"
                pct = item.get('percentage', 0)
            else:
                name, pct = f"Commission {i + 1}", item
            parsed.append(CommissionSplit(name, self._clamp_number(name, pct, float, 0, None)))

        if not parsed:
            self._warn("At least one commission split is required.")
            return None
        return parsed

    def add_commission_split(self, name: Optional[str] = None, percentage: float = 0) -> Optional[ResultSet]:
        pct = self._clamp_number('commission split', percentage, float, 0, None)

        def change(params, options, config):
            label = name or f"Commission {len(options.commission_splits) + 1}"
            options.commission_splits.append(CommissionSplit(label, pct))

        return self.mutate(change)

    def remove_commission_split(self, index: int) -> Optional[ResultSet]:
        splits = self.options.commission_splits
        if not 0 <= index < len(splits):
            self._warn(f"No commission split at position {index + 1}.")
            return self.recompute()
        if len(splits) == 1:
            self._warn("At least one commission split is required.")
            return self.recompute()

        def change(params, options, config):
            del options.commission_splits[index]

        return self.mutate(change)

    def set_commission_split(self, index: int, percentage: Any) -> Optional[ResultSet]:
        splits = self.options.commission_splits
        if not 0 <= index < len(splits):
            self._warn(f"No commission split at position {index + 1}.")
            return self.recompute()
        pct = self._clamp_number(splits[index].name, percentage, float, 0, None)

        def change(params, options, config):
            current = options.commission_splits[index]
            options.commission_splits[index] = CommissionSplit(current.name, pct)

        return self.mutate(change)

    # ------------------------------------------------------------------
    # Rates
    # ------------------------------------------------------------------

    def update_pricing_config(self, **rates: Any) -> Optional[ResultSet]:
        """
        Update pricing rates. Rates are not part of snapshots, so undo
        never reverts them, but the change is still recomputed and recorded.
        """
        for name in rates:
            if name not in RATE_FIELDS:
                raise UnknownFieldError(name)
        clamped = {name: self._clamp_number(name, value, float, 0, None) for name, value in rates.items()}

        def change(params, options, config):
            for name, value in clamped.items():
                setattr(config, name, value)

        return self.mutate(change)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> Optional[ResultSet]:
        """Restore the previous snapshot and recompute with live rates."""
        snapshot = self.history.undo()
        if snapshot is None:
            return None
        result = self._apply_snapshot(snapshot)
        if result is None:
            self.history.redo()
        return result

    def redo(self) -> Optional[ResultSet]:
        """Re-apply the next snapshot and recompute with live rates."""
        snapshot = self.history.redo()
        if snapshot is None:
            return None
        result = self._apply_snapshot(snapshot)
        if result is None:
            self.history.undo()
        return result

    def _apply_snapshot(self, snapshot: HistorySnapshot) -> Optional[ResultSet]:
        params, options = snapshot.restore()
        result = self._compute(params, options, self.config)
        if result is None:
            return None
        self.params, self.options = params, options
        self.result = result
        return result

    def reset(self) -> Optional[ResultSet]:
        """Back to default inputs with an empty history. Rates are kept."""
        previous = (list(self.history.snapshots), self.history.index)
        self.history.clear()

        def change(params, options, config):
            defaults_p, defaults_o = JobParameters(), Options()
            for f in fields(JobParameters):
                setattr(params, f.name, getattr(defaults_p, f.name))
            for f in fields(Options):
                setattr(options, f.name, getattr(defaults_o, f.name))

        result = self.mutate(change)
        if result is None:
            self.history.snapshots, self.history.index = previous
        return result

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def snapshot(self) -> HistorySnapshot:
        """Copy of the current undoable inputs."""
        return HistorySnapshot.capture(self.params, self.options)
