"""Engine subpackage - core quote pricing and undo/redo history."""
from .pricing_engine import compute
from .history import HistoryManager, HistorySnapshot
from .models import JobParameters, PricingConfig, Options, ResultSet, CommissionSplit

__all__ = [
    'compute', 'HistoryManager', 'HistorySnapshot',
    'JobParameters', 'PricingConfig', 'Options', 'ResultSet', 'CommissionSplit',
]
