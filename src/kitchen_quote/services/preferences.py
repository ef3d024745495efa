"""
Preferences Service - the one piece of state persisted between sessions.

Stores a JSON document holding a single "preferences" blob. Only UI
preferences live here; rates and job inputs are never persisted.
"""
import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Optional

from ..config.settings import get_settings

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "preferences"


@dataclass
class Preferences:
    """UI preferences."""
    dark_mode: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> 'Preferences':
        """Create Preferences from a stored blob, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


class PreferencesStore:
    """Reads and writes the preferences blob on local disk."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path or get_settings().preferences_path
        self.preferences = Preferences()

    def load(self) -> Preferences:
        """Load preferences, falling back to defaults on a missing or bad file."""
        self.preferences = Preferences()
        if not self.path.exists():
            return self.preferences

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            blob = data.get(PREFERENCES_KEY, {}) if isinstance(data, dict) else {}
            if isinstance(blob, dict):
                self.preferences = Preferences.from_dict(blob)
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Could not read preferences from %s: %s", self.path, e)
        return self.preferences

    def save(self) -> None:
        """Write the current preferences blob."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump({PREFERENCES_KEY: asdict(self.preferences)}, f, indent=2)

    def update(self, **values) -> Preferences:
        """Apply known preference values and persist them."""
        merged = {**asdict(self.preferences), **values}
        self.preferences = Preferences.from_dict(merged)
        self.save()
        return self.preferences

    def toggle_dark_mode(self) -> bool:
        """Flip dark mode and persist it."""
        self.preferences.dark_mode = not self.preferences.dark_mode
        self.save()
        return self.preferences.dark_mode
