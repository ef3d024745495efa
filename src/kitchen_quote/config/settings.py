"""
Centralized settings and path configuration for the quote tool.
"""
import logging
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional


ENV_PREFIX = "KITCHEN_QUOTE_"

# Rate defaults used when nothing is configured
DEFAULT_RATES = {
    'regular_pay_rate': 16.0,
    'supervisor_pay_rate': 18.0,
    'transport_cost_per_day': 150.0,
    'outside_houston_transport_cost_per_day': 300.0,
    'large_hood_price': 650.0,
    'small_hood_price': 550.0,
    'work_comp_rate': 1.88,
    'gl_rate': 7.33,
}


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    # Walk up from this file to find the project root
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(ENV_PREFIX + name.upper())
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning(
            "Ignoring non-numeric %s%s=%r", ENV_PREFIX, name.upper(), raw
        )
        return default


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Preference blob (dark mode) persisted between sessions
    preferences_path: Path

    # Undo/redo depth
    history_capacity: int = 20

    # Rates seeded into every new PricingConfig
    default_rates: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_RATES))

    log_level: str = "INFO"

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        prefs = os.environ.get(ENV_PREFIX + 'PREFERENCES_PATH')
        preferences_path = Path(prefs) if prefs else root / '.kitchen_quote' / 'preferences.json'

        capacity = int(_env_float('history_capacity', 20))

        # Discover rate overrides
        rates = {name: _env_float(name, default) for name, default in DEFAULT_RATES.items()}

        return cls(
            project_root=root,
            preferences_path=preferences_path,
            history_capacity=max(1, capacity),
            default_rates=rates,
            log_level=os.environ.get(ENV_PREFIX + 'LOG_LEVEL', 'INFO').upper(),
        )


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging for scripts, the API and the UI."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
